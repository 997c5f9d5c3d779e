"""Export configuration and result models."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wikicompiler.schemas.citations import CustomCitation

CitationStyle = Literal["apa", "mla"]

LINE_SPACINGS = (1.15, 1.5, 2.0)


class ExportFormat(str, Enum):
    """Enumeration of supported export formats."""

    MARKDOWN = "markdown"
    JSON = "json"
    DOCX = "docx"
    ODT = "odt"
    HTML = "html"
    TEXT = "text"


class Typography(BaseModel):
    """Font settings for the print layout."""

    model_config = ConfigDict(frozen=True)

    font_pair: Literal["modern", "classic"] = "modern"
    font_size: int = Field(default=16, ge=10, le=24)


class ExportConfig(BaseModel):
    """Fully resolved options for one export.

    Only the print layout reads the page options; ``include_bibliography``
    and ``citation_style`` are honored by every format.
    """

    model_config = ConfigDict(frozen=True)

    paper_size: Literal["letter", "a4"] = "letter"
    layout: Literal["single", "two"] = "single"
    margins: Literal["normal", "narrow", "wide"] = "normal"
    line_spacing: float = 1.5
    header_content: Literal["none", "title", "custom"] = "none"
    custom_header_text: str = ""
    footer_content: Literal["none", "pageNumber", "custom"] = "pageNumber"
    custom_footer_text: str = ""
    typography: Typography = Field(default_factory=Typography)
    include_toc: bool = True
    include_bibliography: bool = True
    citation_style: CitationStyle = "apa"

    @field_validator("line_spacing")
    @classmethod
    def validate_line_spacing(cls, v: float) -> float:
        """Restrict ``line_spacing`` to the supported presets."""
        if v not in LINE_SPACINGS:
            raise ValueError(f"line_spacing must be one of {LINE_SPACINGS}, got {v}")
        return v

    def with_typography(self, **changes: object) -> "ExportConfig":
        """Return a copy with the given typography fields replaced."""
        typography = Typography.model_validate({**self.typography.model_dump(), **changes})
        return self.model_copy(update={"typography": typography})


class ExportSettings(BaseModel):
    """Read-only snapshot of the citation settings an export needs."""

    model_config = ConfigDict(frozen=True)

    custom_citations: list[CustomCitation] = Field(default_factory=list)
    citation_style: CitationStyle | None = None

    @field_validator("custom_citations")
    @classmethod
    def validate_unique_keys(cls, v: list[CustomCitation]) -> list[CustomCitation]:
        """Reject citation sets that reuse a key."""
        duplicates = sorted(key for key, count in Counter(c.key for c in v).items() if count > 1)
        if duplicates:
            raise ValueError(f"duplicate citation keys: {', '.join(duplicates)}")
        return v


class ExportResult(BaseModel):
    """A rendered export ready to be saved."""

    filename: str
    mime_type: str
    content: bytes
