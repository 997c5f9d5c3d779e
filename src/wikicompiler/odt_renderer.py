"""Render document sections into an OpenDocument text (ODT) package."""

from __future__ import annotations

import logging
from typing import Sequence
from xml.sax.saxutils import escape

from wikicompiler.html_parser import parse_html
from wikicompiler.html_utils import strip_invalid_xml_chars
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
from wikicompiler.packaging import write_package
from wikicompiler.schemas import Section

logger = logging.getLogger(__name__)

MIMETYPE = "application/vnd.oasis.opendocument.text"
ODF_VERSION = "1.2"
GENERATOR = "wikicompiler"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
_NAMESPACES = (
    'xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0" '
    'xmlns:style="urn:oasis:names:tc:opendocument:xmlns:style:1.0" '
    'xmlns:text="urn:oasis:names:tc:opendocument:xmlns:text:1.0" '
    'xmlns:fo="urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:meta="urn:oasis:names:tc:opendocument:xmlns:meta:1.0"'
)
_QUOTE_ENTITIES = {"'": "&apos;", '"': "&quot;"}

BODY_STYLE = "Text_20_body"
PAGE_BREAK_STYLE = "PageBreak"
BULLET_LIST_STYLE = "BulletList"
NUMBERED_LIST_STYLE = "NumberedList"
_HEADING_SIZES = {1: "24pt", 2: "18pt", 3: "16pt", 4: "14pt", 5: "12pt", 6: "11pt"}
_LIST_LEVELS = 10


def to_odt(sections: Sequence[Section], *, title: str | None = None) -> bytes:
    """Render sections to ODT bytes.

    The ``mimetype`` entry is written first and stored uncompressed, as
    office suites require. Every section after the first starts on a new page.
    """
    body = "".join(
        (_page_break() if index > 0 else "") + render_blocks(parse_html(section.to_html()))
        for index, section in enumerate(sections)
    )
    logger.debug("Packaging ODT with %d sections", len(sections))
    return write_package(
        [
            ("mimetype", MIMETYPE.encode("ascii"), False),
            ("content.xml", build_content_xml(body).encode("utf-8"), True),
            ("styles.xml", build_styles_xml().encode("utf-8"), True),
            ("meta.xml", build_meta_xml(title).encode("utf-8"), True),
            ("META-INF/manifest.xml", build_manifest_xml().encode("utf-8"), True),
        ]
    )


def xml_escape(text: str) -> str:
    """Escape text for XML content or attribute values."""
    return escape(strip_invalid_xml_chars(text), _QUOTE_ENTITIES)


def render_blocks(blocks: Sequence[Block]) -> str:
    """Render blocks as ``office:text`` body elements."""
    parts: list[str] = []
    index = 0
    while index < len(blocks):
        block = blocks[index]
        if isinstance(block, ListItem):
            group: list[ListItem] = []
            while index < len(blocks) and isinstance(blocks[index], ListItem):
                item = blocks[index]
                if group and item.depth == 0 and item.ordered != group[0].ordered:
                    break
                group.append(item)
                index += 1
            parts.append(_render_list(group))
            continue
        parts.append(_render_block(block))
        index += 1
    return "".join(parts)


def _render_block(block: Block) -> str:
    if isinstance(block, Heading):
        level = block.level if 1 <= block.level <= 6 else 1
        return (
            f'<text:h text:style-name="H{level}" text:outline-level="{level}">'
            f"{_render_runs(block.runs)}</text:h>"
        )
    if isinstance(block, Paragraph):
        return f'<text:p text:style-name="{BODY_STYLE}">{_render_runs(block.runs)}</text:p>'
    if isinstance(block, LineBreak):
        return f'<text:p text:style-name="{BODY_STYLE}"/>'
    return ""


def _render_list(items: list[ListItem]) -> str:
    xml, _ = _render_list_level(items, 0, min(item.depth for item in items))
    return xml


def _render_list_level(items: list[ListItem], index: int, depth: int) -> tuple[str, int]:
    style = NUMBERED_LIST_STYLE if items[index].ordered else BULLET_LIST_STYLE
    parts = [f'<text:list text:style-name="{style}">']
    while index < len(items) and items[index].depth >= depth:
        item = items[index]
        parts.append("<text:list-item>")
        if item.depth > depth:
            # Nested list with no parent item at this level.
            nested, index = _render_list_level(items, index, depth + 1)
            parts.append(nested)
        else:
            parts.append(f'<text:p text:style-name="{BODY_STYLE}">{_render_runs(item.runs)}</text:p>')
            index += 1
            if index < len(items) and items[index].depth > depth:
                nested, index = _render_list_level(items, index, depth + 1)
                parts.append(nested)
        parts.append("</text:list-item>")
    parts.append("</text:list>")
    return "".join(parts), index


def _render_runs(runs: Sequence[InlineRun]) -> str:
    parts: list[str] = []
    for run in runs:
        if isinstance(run, LineBreak):
            parts.append("<text:line-break/>")
        elif isinstance(run, TextRun):
            parts.append(_wrap_spans(xml_escape(run.content), bold=run.bold, italic=run.italic))
        elif isinstance(run, HyperlinkRun):
            text = _wrap_spans(xml_escape(run.text), bold=run.bold, italic=run.italic)
            parts.append(
                f'<text:a xlink:type="simple" xlink:href="{xml_escape(run.href)}" '
                f'text:style-name="Link">{text}</text:a>'
            )
    return "".join(parts)


def _wrap_spans(text: str, *, bold: bool, italic: bool) -> str:
    if italic:
        text = f'<text:span text:style-name="Italic">{text}</text:span>'
    if bold:
        text = f'<text:span text:style-name="Bold">{text}</text:span>'
    return text


def _page_break() -> str:
    return f'<text:p text:style-name="{PAGE_BREAK_STYLE}"/>'


def build_content_xml(body: str) -> str:
    return (
        f'{_XML_DECLARATION}<office:document-content {_NAMESPACES} office:version="{ODF_VERSION}">'
        f"<office:automatic-styles>{_automatic_styles()}</office:automatic-styles>"
        f"<office:body><office:text>{body}</office:text></office:body>"
        "</office:document-content>"
    )


def _automatic_styles() -> str:
    page_break = (
        f'<style:style style:name="{PAGE_BREAK_STYLE}" style:family="paragraph" '
        'style:parent-style-name="Standard">'
        '<style:paragraph-properties fo:break-before="page"/></style:style>'
    )
    bullets = "".join(
        f'<text:list-level-style-bullet text:level="{level}" text:bullet-char="•">'
        f"{_list_level_properties(level)}</text:list-level-style-bullet>"
        for level in range(1, _LIST_LEVELS + 1)
    )
    numbers = "".join(
        f'<text:list-level-style-number text:level="{level}" style:num-suffix="." style:num-format="1">'
        f"{_list_level_properties(level)}</text:list-level-style-number>"
        for level in range(1, _LIST_LEVELS + 1)
    )
    return (
        page_break
        + f'<text:list-style style:name="{BULLET_LIST_STYLE}">{bullets}</text:list-style>'
        + f'<text:list-style style:name="{NUMBERED_LIST_STYLE}">{numbers}</text:list-style>'
    )


def _list_level_properties(level: int) -> str:
    return (
        f'<style:list-level-properties text:space-before="{0.635 * (level - 1):.3f}cm" '
        'text:min-label-width="0.635cm"/>'
    )


def build_styles_xml() -> str:
    headings = "".join(
        f'<style:style style:name="H{level}" style:display-name="Heading {level}" '
        'style:family="paragraph" style:parent-style-name="Heading" '
        f'style:next-style-name="{BODY_STYLE}" style:default-outline-level="{level}" style:class="text">'
        f'<style:text-properties fo:font-size="{size}" fo:font-weight="bold"/></style:style>'
        for level, size in _HEADING_SIZES.items()
    )
    return (
        f'{_XML_DECLARATION}<office:document-styles {_NAMESPACES} office:version="{ODF_VERSION}">'
        "<office:styles>"
        '<style:default-style style:family="paragraph">'
        '<style:text-properties fo:font-size="12pt"/></style:default-style>'
        '<style:style style:name="Standard" style:family="paragraph" style:class="text"/>'
        '<style:style style:name="Heading" style:family="paragraph" style:parent-style-name="Standard" '
        f'style:next-style-name="{BODY_STYLE}" style:class="text">'
        '<style:paragraph-properties fo:margin-top="0.423cm" fo:margin-bottom="0.212cm" '
        'fo:keep-with-next="always"/>'
        '<style:text-properties fo:font-size="14pt" fo:font-weight="bold"/></style:style>'
        f"{headings}"
        f'<style:style style:name="{BODY_STYLE}" style:display-name="Text body" style:family="paragraph" '
        'style:parent-style-name="Standard" style:class="text">'
        '<style:paragraph-properties fo:margin-top="0cm" fo:margin-bottom="0.247cm"/></style:style>'
        '<style:style style:name="Link" style:family="text">'
        '<style:text-properties fo:color="#0563c1" style:text-underline-style="solid" '
        'style:text-underline-width="auto" style:text-underline-color="font-color"/></style:style>'
        '<style:style style:name="Bold" style:family="text">'
        '<style:text-properties fo:font-weight="bold"/></style:style>'
        '<style:style style:name="Italic" style:family="text">'
        '<style:text-properties fo:font-style="italic"/></style:style>'
        "</office:styles>"
        "</office:document-styles>"
    )


def build_meta_xml(title: str | None = None) -> str:
    title_xml = f"<dc:title>{xml_escape(title)}</dc:title>" if title else ""
    return (
        f'{_XML_DECLARATION}<office:document-meta {_NAMESPACES} office:version="{ODF_VERSION}">'
        f"<office:meta><meta:generator>{GENERATOR}</meta:generator>{title_xml}</office:meta>"
        "</office:document-meta>"
    )


def build_manifest_xml() -> str:
    return (
        f"{_XML_DECLARATION}"
        '<manifest:manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0" '
        f'manifest:version="{ODF_VERSION}">'
        f'<manifest:file-entry manifest:full-path="/" manifest:version="{ODF_VERSION}" '
        f'manifest:media-type="{MIMETYPE}"/>'
        '<manifest:file-entry manifest:full-path="content.xml" manifest:media-type="text/xml"/>'
        '<manifest:file-entry manifest:full-path="styles.xml" manifest:media-type="text/xml"/>'
        '<manifest:file-entry manifest:full-path="meta.xml" manifest:media-type="text/xml"/>'
        "</manifest:manifest>"
    )
