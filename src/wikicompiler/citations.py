"""Format bibliography entries in APA or MLA style."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from html import escape
from typing import Awaitable, Callable, Iterable, Sequence
from urllib.parse import quote

from wikicompiler.config import WIKICOMPILER_LANGUAGE
from wikicompiler.exceptions import BibliographyGenerationError
from wikicompiler.schemas import (
    SECTION_BREAK,
    ArticleMetadata,
    CitationStyle,
    CustomCitation,
    Section,
    SectionKind,
)

logger = logging.getLogger(__name__)

FetchMetadata = Callable[[list[str]], Awaitable[list[ArticleMetadata]]]

BIBLIOGRAPHY_TITLE = "Bibliography"
BIBLIOGRAPHY_ERROR_HTML = "<p>Error generating bibliography.</p>"

_MONTHS = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)
# Unreserved characters of JavaScript's encodeURIComponent, beyond those quote() keeps.
_URI_COMPONENT_SAFE = "!~*'()"


async def format_bibliography(
    titles: Sequence[str],
    custom_citations: Sequence[CustomCitation],
    style: CitationStyle,
    fetch_metadata: FetchMetadata,
    *,
    language: str = WIKICOMPILER_LANGUAGE,
) -> str:
    """Return the bibliography as an HTML fragment led by a section break.

    Never raises: a failed metadata lookup yields a visible error notice.
    """
    section = await build_bibliography_section(
        titles, custom_citations, style, fetch_metadata, language=language
    )
    return SECTION_BREAK + section.to_html()


async def build_bibliography_section(
    titles: Sequence[str],
    custom_citations: Sequence[CustomCitation],
    style: CitationStyle,
    fetch_metadata: FetchMetadata,
    *,
    language: str = WIKICOMPILER_LANGUAGE,
) -> Section:
    """Build the bibliography section: wiki entries first, then custom citations."""
    try:
        metadata = await _fetch_metadata(list(titles), fetch_metadata)
    except BibliographyGenerationError as exc:
        logger.warning("Failed to generate bibliography: %s", exc)
        return Section(
            kind=SectionKind.BIBLIOGRAPHY,
            title=BIBLIOGRAPHY_TITLE,
            html=BIBLIOGRAPHY_ERROR_HTML,
        )

    entries = [
        format_wiki_entry(meta, style, language=language)
        for meta in order_metadata(titles, metadata)
    ]
    entries.extend(format_custom_citation(citation, style) for citation in custom_citations)

    items = "".join(f"<li>{entry}</li>" for entry in entries)
    return Section(
        kind=SectionKind.BIBLIOGRAPHY,
        title=BIBLIOGRAPHY_TITLE,
        html=f'<ul class="bibliography">{items}</ul>',
    )


async def _fetch_metadata(titles: list[str], fetch_metadata: FetchMetadata) -> list[ArticleMetadata]:
    if not titles:
        return []
    try:
        return list(await fetch_metadata(titles))
    except Exception as exc:
        raise BibliographyGenerationError(f"Metadata lookup failed: {exc}") from exc


def order_metadata(
    titles: Iterable[str], metadata: Iterable[ArticleMetadata]
) -> list[ArticleMetadata]:
    """Order metadata to follow ``titles``.

    Titles are matched ignoring case and underscores, since the API returns
    normalized titles. Unresolved titles are skipped; metadata matching no
    title is kept at the end in the order received.
    """
    remaining = list(metadata)
    ordered: list[ArticleMetadata] = []
    for title in titles:
        key = _title_key(title)
        for meta in remaining:
            if _title_key(meta.title) == key:
                ordered.append(meta)
                remaining.remove(meta)
                break
    return ordered + remaining


def _title_key(title: str) -> str:
    return title.replace("_", " ").strip().casefold()


def permalink(meta: ArticleMetadata, *, language: str = WIKICOMPILER_LANGUAGE) -> str:
    """Permanent URL of the cited revision."""
    title = quote(meta.title.replace(" ", "_"), safe=_URI_COMPONENT_SAFE)
    return f"https://{language}.wikipedia.org/w/index.php?title={title}&oldid={meta.revid}"


def format_wiki_entry(
    meta: ArticleMetadata, style: CitationStyle, *, language: str = WIKICOMPILER_LANGUAGE
) -> str:
    if style == "mla":
        return format_mla(meta, language=language)
    return format_apa(meta, language=language)


def format_apa(meta: ArticleMetadata, *, language: str = WIKICOMPILER_LANGUAGE) -> str:
    """APA entry dated by the article's last-touched timestamp."""
    touched = _as_utc(meta.touched)
    url = permalink(meta, language=language)
    month = _MONTHS[touched.month - 1]
    return (
        f"<i>{escape(meta.title)}</i>. (n.d.). In Wikipedia. "
        f"Retrieved {month} {touched.day}, {touched.year}, from {_link(url)}"
    )


def format_mla(meta: ArticleMetadata, *, language: str = WIKICOMPILER_LANGUAGE) -> str:
    """MLA entry; retrieval and access dates are both the last-touched date."""
    touched = _as_utc(meta.touched)
    url = permalink(meta, language=language)
    date = f"{touched.day} {_MONTHS[touched.month - 1][:3]}. {touched.year}"
    return (
        f'"{escape(meta.title, quote=False)}." <i>Wikipedia, The Free Encyclopedia</i>. '
        f"Wikimedia Foundation, Inc. {date}. Web. {date}. &lt;{_link(url)}&gt;"
    )


def format_custom_citation(citation: CustomCitation, style: CitationStyle) -> str:
    """Format a user-entered citation, omitting blank fields."""
    author = citation.author.strip()
    year = citation.year.strip()
    title = citation.title.strip()
    url = citation.url.strip()

    if style == "mla":
        head = [f"{escape(author)}." if author else "", f'"{escape(title, quote=False)}."' if title else ""]
        tail = [escape(year) if year else "", _link(url) if url else ""]
        head_text = " ".join(part for part in head if part)
        tail_text = ", ".join(part for part in tail if part)
        if head_text and tail_text:
            return f"{head_text}, {tail_text}."
        if tail_text:
            return f"{tail_text}."
        return head_text

    parts = [
        f"{escape(author)}." if author else "",
        f"({escape(year)})." if year else "",
        f"<i>{escape(title)}</i>." if title else "",
        f"Retrieved from {_link(url)}" if url else "",
    ]
    return " ".join(part for part in parts if part)


def _link(url: str) -> str:
    return f'<a href="{escape(url)}">{escape(url)}</a>'


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
