"""wikicompiler: compile Wikipedia articles into Markdown, DOCX, ODT and more."""

from wikicompiler.assembler import assemble_sections, sections_to_html, split_sections
from wikicompiler.citations import format_bibliography
from wikicompiler.docx_renderer import to_docx
from wikicompiler.exceptions import (
    ArticleFetchError,
    ArticleNotFoundError,
    BibliographyGenerationError,
    FetchError,
    ParseWarning,
    RateLimitError,
    RenderError,
    WikiCompilerError,
)
from wikicompiler.export import export_project
from wikicompiler.html_parser import parse_html
from wikicompiler.markdown import to_markdown
from wikicompiler.odt_renderer import to_odt
from wikicompiler.output_formatter import to_json, to_plain_text
from wikicompiler.print_layout import render_print_html
from wikicompiler.schemas import (
    ArticleMetadata,
    CustomCitation,
    ExportConfig,
    ExportFormat,
    ExportResult,
    ExportSettings,
    Project,
    ProjectArticle,
    Section,
    SectionKind,
)
from wikicompiler.wikipedia import WikipediaClient

__all__ = [
    "ArticleFetchError",
    "ArticleMetadata",
    "ArticleNotFoundError",
    "BibliographyGenerationError",
    "CustomCitation",
    "ExportConfig",
    "ExportFormat",
    "ExportResult",
    "ExportSettings",
    "FetchError",
    "ParseWarning",
    "Project",
    "ProjectArticle",
    "RateLimitError",
    "RenderError",
    "Section",
    "SectionKind",
    "WikiCompilerError",
    "WikipediaClient",
    "assemble_sections",
    "export_project",
    "format_bibliography",
    "parse_html",
    "render_print_html",
    "sections_to_html",
    "split_sections",
    "to_docx",
    "to_json",
    "to_markdown",
    "to_odt",
    "to_plain_text",
]
