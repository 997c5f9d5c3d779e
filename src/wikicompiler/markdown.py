"""Convert assembled HTML to Markdown with a custom serializer."""

from __future__ import annotations

import re
from typing import Sequence

from wikicompiler.assembler import split_sections
from wikicompiler.html_parser import parse_html
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

SECTION_SEPARATOR = "\n\n---\n\n"

_ESCAPE_RE = re.compile(r"([\\`*_\[\]])")
_LINE_START_RE = re.compile(r"^(?:(#{1,6}|[-+>])|(\d+))(?=\.?\s)")


def to_markdown(assembled_html: str) -> str:
    """Convert combined document HTML into Markdown.

    Each section becomes its own run of Markdown blocks; section breaks are
    rendered as horizontal rules.
    """
    rendered = [blocks_to_markdown(parse_html(fragment)) for fragment in split_sections(assembled_html)]
    return SECTION_SEPARATOR.join(part for part in rendered if part).strip()


def convert_fragment_to_markdown(html: str) -> str:
    """Convert a single HTML fragment, ignoring section breaks."""
    return blocks_to_markdown(parse_html(html))


def blocks_to_markdown(blocks: Sequence[Block]) -> str:
    out: list[str] = []
    list_lines: list[str] = []
    counters: dict[int, int] = {}

    def flush_list() -> None:
        if list_lines:
            out.append("\n".join(list_lines))
            list_lines.clear()
        counters.clear()

    for block in blocks:
        if isinstance(block, ListItem):
            list_lines.append(_serialize_list_item(block, counters))
            continue
        flush_list()
        if isinstance(block, Heading):
            text = _serialize_runs(block.runs, newline=" ").strip()
            if text:
                out.append(f"{'#' * min(max(block.level, 1), 6)} {text}")
        elif isinstance(block, Paragraph):
            text = _escape_line_start(_serialize_runs(block.runs))
            if text:
                out.append(text)
    flush_list()
    return "\n\n".join(out).strip()


def _serialize_list_item(item: ListItem, counters: dict[int, int]) -> str:
    for depth in [d for d in counters if d > item.depth]:
        del counters[depth]
    indent = "  " * item.depth
    if item.ordered:
        counters[item.depth] = counters.get(item.depth, 0) + 1
        marker = f"{counters[item.depth]}."
    else:
        counters.pop(item.depth, None)
        marker = "-"
    text = _serialize_runs(item.runs, newline="  \n" + indent + "  ")
    return f"{indent}{marker} {text}"


def _serialize_runs(runs: Sequence[InlineRun], *, newline: str = "  \n") -> str:
    parts: list[str] = []
    after_break = False
    for run in runs:
        if isinstance(run, LineBreak):
            parts.append(newline)
            after_break = True
            continue
        if isinstance(run, TextRun):
            text = _escape(run.content)
            if after_break:
                # Each hard-broken line is parsed as if it started a block.
                text = _escape_line_start(text)
            parts.append(_emphasize(text, bold=run.bold, italic=run.italic))
        elif isinstance(run, HyperlinkRun):
            label = _escape(run.text.strip()) or _escape(run.href)
            link = f"[{label}]({_escape_url(run.href)})"
            lead, trail = _edge_whitespace(run.text)
            parts.append(lead + _emphasize(link, bold=run.bold, italic=run.italic) + trail)
        after_break = False
    return "".join(parts)


def _emphasize(text: str, *, bold: bool, italic: bool) -> str:
    if not (bold or italic):
        return text
    stripped = text.strip()
    if not stripped:
        return text
    lead, trail = _edge_whitespace(text)
    marker = "***" if bold and italic else "**" if bold else "*"
    return f"{lead}{marker}{stripped}{marker}{trail}"


def _edge_whitespace(text: str) -> tuple[str, str]:
    stripped = text.strip()
    if not stripped:
        return "", ""
    start = text.index(stripped)
    return text[:start], text[start + len(stripped):]


def _escape(text: str) -> str:
    return _ESCAPE_RE.sub(r"\\\1", text)


def _escape_line_start(text: str) -> str:
    match = _LINE_START_RE.match(text)
    if not match:
        return text
    if match.group(1):
        return "\\" + text
    number = match.group(2)
    rest = text[len(number):]
    return f"{number}\\{rest}" if rest.startswith(".") else text


def _escape_url(url: str) -> str:
    return url.replace(" ", "%20").replace("(", "%28").replace(")", "%29")
