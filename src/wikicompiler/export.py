"""Export pipeline: assemble a project and render it to a file format."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from wikicompiler.assembler import FetchArticleHtml, assemble_sections, sections_to_html
from wikicompiler.citations import FetchMetadata
from wikicompiler.docx_renderer import to_docx
from wikicompiler.exceptions import BibliographyGenerationError, RenderError
from wikicompiler.markdown import to_markdown
from wikicompiler.odt_renderer import MIMETYPE as ODT_MIMETYPE
from wikicompiler.odt_renderer import to_odt
from wikicompiler.output_formatter import to_json, to_plain_text
from wikicompiler.print_layout import render_print_html
from wikicompiler.schemas import (
    ArticleMetadata,
    ExportConfig,
    ExportFormat,
    ExportResult,
    ExportSettings,
    Project,
    Section,
    SectionKind,
)

logger = logging.getLogger(__name__)

SaveFile = Callable[[bytes, str, str], None]

DEFAULT_FILENAME = "compilation"

EXTENSIONS = {
    ExportFormat.MARKDOWN: "md",
    ExportFormat.JSON: "json",
    ExportFormat.DOCX: "docx",
    ExportFormat.ODT: "odt",
    ExportFormat.HTML: "html",
    ExportFormat.TEXT: "txt",
}

MIME_TYPES = {
    ExportFormat.MARKDOWN: "text/markdown;charset=utf-8",
    ExportFormat.JSON: "application/json",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ExportFormat.ODT: ODT_MIMETYPE,
    ExportFormat.HTML: "text/html;charset=utf-8",
    ExportFormat.TEXT: "text/plain;charset=utf-8",
}


async def export_project(
    project: Project,
    export_format: ExportFormat | str,
    *,
    fetch_article_html: FetchArticleHtml,
    config: ExportConfig | None = None,
    settings: ExportSettings | None = None,
    fetch_metadata: FetchMetadata | None = None,
    save_file: SaveFile | None = None,
) -> ExportResult:
    """Assemble and render a project, then hand the bytes to ``save_file``.

    ``save_file`` only runs once the complete output exists, so a failed
    export never leaves a partial file behind.

    Args:
        project: The project to export.
        export_format: Target format.
        fetch_article_html: Returns the body HTML for an article title.
        config: Export options. Uses defaults if None.
        settings: Citation settings; its ``citation_style`` overrides the
            config's when set.
        fetch_metadata: Batch metadata lookup used for the bibliography. When
            the bibliography is requested without one, the bibliography
            section shows the error notice instead of entries.
        save_file: Receives ``(content, filename, mime_type)`` on success.

    Returns:
        The rendered export.

    Raises:
        ArticleFetchError: If any article's content cannot be fetched.
        RenderError: If the format renderer fails.
    """
    fmt = ExportFormat(export_format)
    opts = config or ExportConfig()
    citation_settings = settings or ExportSettings()
    if opts.include_bibliography and fetch_metadata is None:
        logger.warning("No metadata lookup for project %s; bibliography will show an error", project.id)
        fetch_metadata = _missing_metadata_lookup

    sections = await assemble_sections(
        project,
        fetch_article_html,
        config=opts,
        fetch_metadata=fetch_metadata,
        custom_citations=citation_settings.custom_citations,
        citation_style=citation_settings.citation_style,
    )

    try:
        content = render_sections(project, sections, fmt, opts)
    except RenderError:
        raise
    except Exception as exc:
        logger.error("Failed to render %s export for project %s: %s", fmt.value, project.id, exc)
        raise RenderError(fmt.value) from exc

    result = ExportResult(
        filename=export_filename(project.name, fmt),
        mime_type=MIME_TYPES[fmt],
        content=content,
    )
    if save_file is not None:
        save_file(result.content, result.filename, result.mime_type)
    return result


async def _missing_metadata_lookup(titles: list[str]) -> list[ArticleMetadata]:
    raise BibliographyGenerationError("No article metadata lookup was provided")


def render_sections(
    project: Project,
    sections: Sequence[Section],
    export_format: ExportFormat,
    config: ExportConfig,
) -> bytes:
    """Render assembled sections in the requested format."""
    if export_format is ExportFormat.DOCX:
        return to_docx(sections, title=project.name)
    if export_format is ExportFormat.ODT:
        return to_odt(sections, title=project.name)
    if export_format is ExportFormat.JSON:
        articles = [section for section in sections if section.kind == SectionKind.ARTICLE]
        return to_json(project, articles).encode("utf-8")
    if export_format is ExportFormat.HTML:
        return render_print_html(project.name, sections, config).encode("utf-8")

    assembled_html = sections_to_html(sections)
    if export_format is ExportFormat.MARKDOWN:
        return f"# {project.name}\n\n{to_markdown(assembled_html)}".encode("utf-8")
    return to_plain_text(assembled_html).encode("utf-8")


def export_filename(project_name: str, export_format: ExportFormat) -> str:
    """Build ``<Project_Name>.<ext>`` with spaces replaced by underscores."""
    stem = project_name.strip().replace(" ", "_") or DEFAULT_FILENAME
    return f"{stem}.{EXTENSIONS[export_format]}"
