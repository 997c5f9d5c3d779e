"""Assemble a project into ordered document sections."""

from __future__ import annotations

import logging
from html import escape
from typing import Awaitable, Callable, Sequence

from wikicompiler.citations import FetchMetadata, build_bibliography_section
from wikicompiler.exceptions import ArticleFetchError
from wikicompiler.schemas import (
    SECTION_BREAK,
    CitationStyle,
    CustomCitation,
    ExportConfig,
    Project,
    Section,
    SectionKind,
)

logger = logging.getLogger(__name__)

FetchArticleHtml = Callable[[str], Awaitable[str]]

NOTES_TITLE = "Project Notes"


async def assemble_sections(
    project: Project,
    fetch_article_html: FetchArticleHtml,
    *,
    config: ExportConfig | None = None,
    fetch_metadata: FetchMetadata | None = None,
    custom_citations: Sequence[CustomCitation] = (),
    citation_style: CitationStyle | None = None,
) -> list[Section]:
    """Build the document: notes, then articles in project order, then bibliography.

    Articles are fetched one at a time in project order. The first failing
    fetch aborts assembly with ``ArticleFetchError`` so an export never
    silently omits an article.

    Args:
        project: The project to assemble.
        fetch_article_html: Returns the body HTML for an article title.
        config: Export options; only ``include_bibliography`` and
            ``citation_style`` are read here.
        fetch_metadata: Batch metadata lookup, required for the bibliography.
        custom_citations: User citations appended after the wiki entries.
        citation_style: Overrides ``config.citation_style`` when given.

    Returns:
        The ordered list of sections.

    Raises:
        ArticleFetchError: If any article's content cannot be fetched.
    """
    opts = config or ExportConfig()
    sections: list[Section] = []

    notes = build_notes_section(project.notes)
    if notes is not None:
        sections.append(notes)

    for title in project.titles:
        html = await _fetch_article(title, fetch_article_html)
        sections.append(Section(kind=SectionKind.ARTICLE, title=title, html=html))

    if opts.include_bibliography:
        if fetch_metadata is None:
            raise ValueError("fetch_metadata is required when the bibliography is included")
        sections.append(
            await build_bibliography_section(
                project.titles,
                custom_citations,
                citation_style or opts.citation_style,
                fetch_metadata,
            )
        )

    logger.debug("Assembled %d sections for project %s", len(sections), project.id)
    return sections


def build_notes_section(notes: str | None) -> Section | None:
    """Return the notes section, or None when there are no notes."""
    if not notes or not notes.strip():
        return None
    lines = notes.strip("\n").splitlines()
    body = "<br>".join(escape(line) for line in lines)
    return Section(kind=SectionKind.NOTES, title=NOTES_TITLE, html=f"<p>{body}</p>")


async def _fetch_article(title: str, fetch_article_html: FetchArticleHtml) -> str:
    try:
        return await fetch_article_html(title)
    except ArticleFetchError:
        raise
    except Exception as exc:
        logger.error("Failed to fetch article %r: %s", title, exc)
        raise ArticleFetchError(title) from exc


def sections_to_html(sections: Sequence[Section]) -> str:
    """Join sections into one HTML string separated by section-break markers."""
    return SECTION_BREAK.join(section.to_html() for section in sections)


def split_sections(html: str) -> list[str]:
    """Split combined HTML at section-break markers, dropping empty pieces."""
    return [part for part in html.split(SECTION_BREAK) if part.strip()]
