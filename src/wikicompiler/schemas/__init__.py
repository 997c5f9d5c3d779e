"""Shared schemas for wikicompiler."""

from wikicompiler.schemas.citations import ArticleMetadata, CustomCitation
from wikicompiler.schemas.export import (
    CitationStyle,
    ExportConfig,
    ExportFormat,
    ExportResult,
    ExportSettings,
    Typography,
)
from wikicompiler.schemas.project import Project, ProjectArticle
from wikicompiler.schemas.sections import SECTION_BREAK, Section, SectionKind

__all__ = [
    "ArticleMetadata",
    "CitationStyle",
    "CustomCitation",
    "ExportConfig",
    "ExportFormat",
    "ExportResult",
    "ExportSettings",
    "Project",
    "ProjectArticle",
    "SECTION_BREAK",
    "Section",
    "SectionKind",
    "Typography",
]
