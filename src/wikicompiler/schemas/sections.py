"""Assembled document sections."""

from __future__ import annotations

from enum import Enum
from html import escape

from pydantic import BaseModel, ConfigDict

# Marker placed between sections in the combined HTML; renderers turn it into a hard break.
SECTION_BREAK = "<!-- wikicompiler:section-break -->"


class SectionKind(str, Enum):
    """Kinds of sections in an assembled document."""

    NOTES = "notes"
    ARTICLE = "article"
    BIBLIOGRAPHY = "bibliography"


class Section(BaseModel):
    """One logical block of the assembled document."""

    model_config = ConfigDict(frozen=True)

    kind: SectionKind
    title: str
    html: str

    def to_html(self) -> str:
        """Render the section as a titled HTML fragment."""
        return (
            f'<section class="section section-{self.kind.value}">'
            f"<h1>{escape(self.title)}</h1>{self.html}</section>"
        )
