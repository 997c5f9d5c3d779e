"""Structural JSON and plain-text dumps of an assembled document."""

from __future__ import annotations

import json
from typing import Sequence

from wikicompiler.assembler import split_sections
from wikicompiler.html_parser import parse_html
from wikicompiler.ir import Block, ListItem, block_text
from wikicompiler.schemas import Project, Section


def to_json(project: Project, articles: Sequence[Section]) -> str:
    """Dump the project and its article HTML as pretty-printed JSON."""
    payload = {
        "projectName": project.name,
        "projectNotes": project.notes or "",
        "articles": [{"title": article.title, "html": article.html} for article in articles],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_plain_text(assembled_html: str) -> str:
    """Strip all markup, keeping block boundaries as blank lines."""
    rendered = [_render_blocks(parse_html(fragment)) for fragment in split_sections(assembled_html)]
    return "\n\n".join(part for part in rendered if part).strip()


def _render_blocks(blocks: Sequence[Block]) -> str:
    lines: list[str] = []
    for block in blocks:
        text = block_text(block).strip()
        if not text:
            continue
        if isinstance(block, ListItem):
            text = "  " * block.depth + "- " + text
        lines.append(text)
    return "\n\n".join(lines)
