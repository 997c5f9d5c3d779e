"""Parse HTML fragments into format-neutral document blocks."""

from __future__ import annotations

import logging
import re
import warnings
from dataclasses import dataclass, replace

from wikicompiler.exceptions import ParseWarning
from wikicompiler.html_utils import (
    find_document_root,
    make_soup,
    strip_invalid_xml_chars,
    strip_unwanted_elements,
)
from wikicompiler.ir import (
    Block,
    Heading,
    HyperlinkRun,
    InlineRun,
    LineBreak,
    ListItem,
    Paragraph,
    TextRun,
)

try:
    from bs4.element import NavigableString, PreformattedString, Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML parsing (pip install beautifulsoup4)."
    ) from exc

logger = logging.getLogger(__name__)

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_LIST_TAGS = frozenset({"ul", "ol"})
_BOLD_TAGS = frozenset({"b", "strong"})
_ITALIC_TAGS = frozenset({"i", "em"})
# Elements that flow inside a line of text rather than starting a new block.
_INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "cite", "code", "data", "dfn", "em",
        "font", "i", "img", "kbd", "label", "mark", "q", "s", "samp", "small",
        "span", "strong", "sub", "sup", "time", "u", "var", "wbr",
    }
)
# Containers that are flattened without comment.
_KNOWN_CONTAINERS = frozenset(
    {
        "html", "body", "div", "section", "article", "main", "header", "footer",
        "aside", "nav", "figure", "figcaption", "blockquote", "table", "thead",
        "tbody", "tfoot", "tr", "td", "th", "caption", "dl", "dt", "dd",
        "center", "details", "summary", "pre", "address", "hr",
    }
)
_BLOCK_TAGS = sorted(_HEADING_TAGS | _LIST_TAGS | _KNOWN_CONTAINERS | {"p", "li"})
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class _Format:
    """Formatting inherited from enclosing inline elements."""

    bold: bool = False
    italic: bool = False
    href: str | None = None

    def enter(self, tag: Tag) -> "_Format":
        name = tag.name
        if name in _BOLD_TAGS:
            return replace(self, bold=True)
        if name in _ITALIC_TAGS:
            return replace(self, italic=True)
        if name == "a" and self.href is None:
            target = (tag.get("href") or "").strip()
            if target:
                return replace(self, href=target)
        return self


def parse_html(html: str) -> list[Block]:
    """Convert an HTML fragment into an ordered list of blocks.

    Never raises for malformed or unexpected markup: unknown elements are
    flattened, and if the walk fails part-way the blocks built so far are
    returned and a ``ParseWarning`` is emitted.
    """
    builder = _BlockBuilder()
    try:
        soup = make_soup(html)
        strip_unwanted_elements(soup)
        builder.walk(find_document_root(soup))
    except Exception as exc:
        logger.warning("HTML parsing stopped early: %s", exc)
        warnings.warn(f"HTML parsing stopped early: {exc}", ParseWarning, stacklevel=2)
    builder.flush()
    return builder.blocks


class _BlockBuilder:
    """Accumulates blocks; loose inline content becomes an implicit paragraph."""

    def __init__(self) -> None:
        self.blocks: list[Block] = []
        self._pending: list[InlineRun] = []

    def walk(self, container: Tag, fmt: _Format = _Format()) -> None:
        for child in list(container.children):
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                self._pending.extend(_collect_runs(child, fmt))
                continue
            if isinstance(child, Tag):
                self._walk_tag(child, fmt)

    def flush(self) -> None:
        runs = _finalize_runs(self._pending)
        self._pending = []
        if runs:
            self.blocks.append(Paragraph(runs))

    def _walk_tag(self, tag: Tag, fmt: _Format) -> None:
        name = tag.name
        if name in _INLINE_TAGS:
            if tag.find(_BLOCK_TAGS) is None:
                self._pending.extend(_collect_runs(tag, fmt))
            else:
                # Inline wrapper around blocks: keep the blocks, carry the formatting.
                self.walk(tag, fmt.enter(tag))
            return

        if name == "br":
            if any(_is_visible(run) for run in self._pending):
                self._pending.append(LineBreak())
            else:
                self.flush()
                self.blocks.append(LineBreak())
            return

        self.flush()

        if name in _HEADING_TAGS:
            runs = _finalize_runs(_collect_runs(tag, fmt))
            if runs:
                self.blocks.append(Heading(level=int(name[1]), runs=runs))
            return

        if name == "p":
            runs = _finalize_runs(_collect_runs(tag, fmt))
            if runs:
                self.blocks.append(Paragraph(runs))
            return

        if name in _LIST_TAGS:
            self._walk_list(tag, depth=0, fmt=fmt)
            return

        if name == "li":
            self._walk_list_item(tag, ordered=False, depth=0, fmt=fmt)
            return

        if name not in _KNOWN_CONTAINERS:
            logger.debug("Flattening unrecognized element <%s>", name)
        self.walk(tag, fmt)
        self.flush()

    def _walk_list(self, list_tag: Tag, *, depth: int, fmt: _Format) -> None:
        ordered = list_tag.name == "ol"
        for item in list_tag.find_all("li", recursive=False):
            self._walk_list_item(item, ordered=ordered, depth=depth, fmt=fmt)

    def _walk_list_item(self, item: Tag, *, ordered: bool, depth: int, fmt: _Format) -> None:
        runs: list[InlineRun] = []
        nested_lists: list[Tag] = []
        for child in item.children:
            if isinstance(child, Tag) and child.name in _LIST_TAGS:
                nested_lists.append(child)
            else:
                runs.extend(_collect_runs(child, fmt))
        finalized = _finalize_runs(runs)
        if finalized:
            self.blocks.append(ListItem(ordered=ordered, runs=finalized, depth=depth))
        for nested in nested_lists:
            self._walk_list(nested, depth=depth + 1, fmt=fmt)


def _collect_runs(node: Tag | NavigableString, fmt: _Format = _Format()) -> list[InlineRun]:
    """Flatten a subtree into runs, resolving bold/italic/link per text leaf."""
    if isinstance(node, PreformattedString):
        return []
    if isinstance(node, NavigableString):
        text = strip_invalid_xml_chars(str(node))
        if not text:
            return []
        if fmt.href is not None:
            return [HyperlinkRun(href=fmt.href, text=text, bold=fmt.bold, italic=fmt.italic)]
        return [TextRun(content=text, bold=fmt.bold, italic=fmt.italic)]
    if not isinstance(node, Tag):
        return []

    name = node.name
    if name == "br":
        return [LineBreak()]
    fmt = fmt.enter(node)

    runs: list[InlineRun] = []
    for child in node.children:
        runs.extend(_collect_runs(child, fmt))
    if name not in _INLINE_TAGS and runs:
        # Block content nested inside a line still separates words.
        runs.append(TextRun(content=" "))
    return runs


def _is_visible(run: InlineRun) -> bool:
    if isinstance(run, TextRun):
        return bool(run.content.strip())
    if isinstance(run, HyperlinkRun):
        return bool(run.text.strip())
    return True


def _run_value(run: InlineRun) -> str:
    return run.content if isinstance(run, TextRun) else run.text


def _with_value(run: InlineRun, value: str) -> InlineRun:
    if isinstance(run, TextRun):
        return replace(run, content=value)
    return replace(run, text=value)


def _finalize_runs(runs: list[InlineRun]) -> tuple[InlineRun, ...]:
    """Collapse whitespace, trim block edges, drop empties and merge neighbours."""
    result: list[InlineRun] = []
    at_line_start = True
    for run in runs:
        if isinstance(run, LineBreak):
            _rstrip_last(result)
            if result and not isinstance(result[-1], LineBreak):
                result.append(run)
            at_line_start = True
            continue
        value = _WHITESPACE_RE.sub(" ", _run_value(run))
        if at_line_start or (result and _run_value(result[-1]).endswith(" ")):
            value = value.lstrip(" ")
        if not value:
            continue
        result.append(_with_value(run, value))
        at_line_start = False

    _rstrip_last(result)
    while result and isinstance(result[-1], LineBreak):
        result.pop()
        _rstrip_last(result)
    return tuple(_merge_adjacent(result))


def _rstrip_last(runs: list[InlineRun]) -> None:
    while runs and not isinstance(runs[-1], LineBreak):
        value = _run_value(runs[-1]).rstrip(" ")
        if value:
            runs[-1] = _with_value(runs[-1], value)
            return
        runs.pop()


def _merge_adjacent(runs: list[InlineRun]) -> list[InlineRun]:
    merged: list[InlineRun] = []
    for run in runs:
        previous = merged[-1] if merged else None
        if (
            isinstance(run, TextRun)
            and isinstance(previous, TextRun)
            and (previous.bold, previous.italic) == (run.bold, run.italic)
        ):
            merged[-1] = replace(previous, content=previous.content + run.content)
        elif (
            isinstance(run, HyperlinkRun)
            and isinstance(previous, HyperlinkRun)
            and (previous.href, previous.bold, previous.italic) == (run.href, run.bold, run.italic)
        ):
            merged[-1] = replace(previous, text=previous.text + run.text)
        else:
            merged.append(run)
    return merged
