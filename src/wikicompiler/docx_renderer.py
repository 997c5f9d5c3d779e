"""Render document sections into a DOCX word-processing package."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Sequence

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_BREAK, WD_UNDERLINE
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import RGBColor
from docx.text.paragraph import Paragraph as DocxParagraph

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
from wikicompiler.packaging import normalize_package
from wikicompiler.schemas import Section

logger = logging.getLogger(__name__)

HYPERLINK_STYLE = "Hyperlink"
HYPERLINK_COLOR = RGBColor(0x05, 0x63, 0xC1)
LIST_STYLE = "List Bullet"


def to_docx(sections: Sequence[Section], *, title: str | None = None) -> bytes:
    """Render sections to DOCX bytes.

    Every section after the first starts on a new page: its first paragraph
    opens with a page-break run. Ordered and unordered lists both use bullet
    paragraphs. Output is byte-identical for identical input.
    """
    document = Document()
    if title:
        document.core_properties.title = strip_invalid_xml_chars(title)
    hyperlink_style_id = _ensure_hyperlink_style(document)

    started = False
    for section in sections:
        blocks = parse_html(section.to_html())
        logger.debug("Rendering %d blocks for section %r", len(blocks), section.title)
        for index, block in enumerate(blocks):
            _render_block(document, block, hyperlink_style_id, page_break=started and index == 0)
        started = started or bool(blocks)

    buffer = BytesIO()
    document.save(buffer)
    return normalize_package(buffer.getvalue())


def _ensure_hyperlink_style(document: DocxDocument) -> str:
    styles = document.styles
    try:
        style = styles[HYPERLINK_STYLE]
    except KeyError:
        style = styles.add_style(HYPERLINK_STYLE, WD_STYLE_TYPE.CHARACTER)
        style.font.color.rgb = HYPERLINK_COLOR
        style.font.underline = WD_UNDERLINE.SINGLE
    return style.style_id


def _render_block(
    document: DocxDocument, block: Block, hyperlink_style_id: str, *, page_break: bool = False
) -> None:
    if isinstance(block, Heading):
        level = block.level if 1 <= block.level <= 6 else 1
        paragraph = document.add_heading(level=level)
    elif isinstance(block, ListItem):
        paragraph = document.add_paragraph(style=LIST_STYLE)
    else:
        paragraph = document.add_paragraph()
    if page_break:
        paragraph.add_run().add_break(WD_BREAK.PAGE)
    if not isinstance(block, LineBreak):
        _render_runs(paragraph, block.runs, hyperlink_style_id)


def _render_runs(
    paragraph: DocxParagraph, runs: Sequence[InlineRun], hyperlink_style_id: str
) -> None:
    for run in runs:
        if isinstance(run, LineBreak):
            paragraph.add_run().add_break()
        elif isinstance(run, TextRun):
            docx_run = paragraph.add_run(run.content)
            if run.bold:
                docx_run.bold = True
            if run.italic:
                docx_run.italic = True
        elif isinstance(run, HyperlinkRun):
            _append_hyperlink(paragraph, run, hyperlink_style_id)


def _append_hyperlink(paragraph: DocxParagraph, run: HyperlinkRun, style_id: str) -> None:
    r_id = paragraph.part.relate_to(run.href, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)

    w_r = OxmlElement("w:r")
    r_pr = OxmlElement("w:rPr")
    r_style = OxmlElement("w:rStyle")
    r_style.set(qn("w:val"), style_id)
    r_pr.append(r_style)
    if run.bold:
        r_pr.append(OxmlElement("w:b"))
    if run.italic:
        r_pr.append(OxmlElement("w:i"))
    w_r.append(r_pr)

    w_t = OxmlElement("w:t")
    w_t.set(qn("xml:space"), "preserve")
    w_t.text = run.text
    w_r.append(w_t)

    hyperlink.append(w_r)
    paragraph._p.append(hyperlink)
