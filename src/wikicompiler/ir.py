"""Format-neutral block/inline model shared by all renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class TextRun:
    content: str
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class HyperlinkRun:
    href: str
    text: str
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class LineBreak:
    """Hard line break; valid both as a block and inside a run list."""


InlineRun = Union[TextRun, HyperlinkRun, LineBreak]


@dataclass(frozen=True)
class Heading:
    level: int
    runs: tuple[InlineRun, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Paragraph:
    runs: tuple[InlineRun, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ListItem:
    ordered: bool
    runs: tuple[InlineRun, ...] = field(default_factory=tuple)
    depth: int = 0


Block = Union[Heading, Paragraph, ListItem, LineBreak]


def run_text(run: InlineRun) -> str:
    """Return the visible text of a run."""
    if isinstance(run, TextRun):
        return run.content
    if isinstance(run, HyperlinkRun):
        return run.text
    return "\n"


def block_text(block: Block) -> str:
    """Return the visible text of a block, without formatting."""
    if isinstance(block, LineBreak):
        return ""
    return "".join(run_text(run) for run in block.runs)
