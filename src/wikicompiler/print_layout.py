"""Render sections into a print-ready HTML page (the PDF path and HTML export)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader

from wikicompiler.config import WIKICOMPILER_LANGUAGE
from wikicompiler.schemas import ExportConfig, Section, SectionKind

PAPER_SIZES = {"letter": "letter", "a4": "A4"}
MARGINS = {"normal": "1in", "narrow": "0.5in", "wide": "1.5in"}
FONT_PAIRS = {
    "modern": {"body": "'Inter', sans-serif", "heading": "'Inter', sans-serif"},
    "classic": {"body": "'Lora', serif", "heading": "'Lora', serif"},
}


@dataclass(slots=True)
class PrintedSection:
    kind: str
    title: str
    anchor: str
    html: str


class PrintLayoutRenderer:
    """Render sections into the print template."""

    def __init__(self, template_path: Path | None = None) -> None:
        if template_path is None:
            template_path = Path(__file__).resolve().parent / "templates" / "print.html"

        loader = FileSystemLoader(str(template_path.parent))
        self._env = Environment(loader=loader, autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self._template_name = template_path.name

    def render(
        self,
        project_name: str,
        sections: Sequence[Section],
        config: ExportConfig | None = None,
        *,
        language: str = WIKICOMPILER_LANGUAGE,
    ) -> str:
        opts = config or ExportConfig()
        printed = _printed_sections(sections)
        toc = [
            {"title": section.title, "anchor": section.anchor}
            for section in printed
            if section.kind == SectionKind.ARTICLE.value
        ]

        template = self._env.get_template(self._template_name)
        return template.render(
            language=language,
            title=project_name,
            page={
                "size": PAPER_SIZES[opts.paper_size],
                "margin": MARGINS[opts.margins],
                "header": _header_content(project_name, opts),
                "footer": _footer_content(opts),
            },
            fonts=FONT_PAIRS[opts.typography.font_pair],
            font_size=opts.typography.font_size,
            line_height=opts.line_spacing,
            two_columns=opts.layout == "two",
            toc=toc if opts.include_toc else [],
            sections=printed,
        )


def render_print_html(
    project_name: str,
    sections: Sequence[Section],
    config: ExportConfig | None = None,
) -> str:
    """Render sections with the bundled print template."""
    return PrintLayoutRenderer().render(project_name, sections, config)


def _printed_sections(sections: Sequence[Section]) -> list[PrintedSection]:
    printed: list[PrintedSection] = []
    article_index = 0
    for section in sections:
        if section.kind == SectionKind.ARTICLE:
            anchor = f"article-toc-{article_index}"
            article_index += 1
        else:
            anchor = section.kind.value
        printed.append(
            PrintedSection(kind=section.kind.value, title=section.title, anchor=anchor, html=section.html)
        )
    return printed


def _header_content(project_name: str, opts: ExportConfig) -> str | None:
    if opts.header_content == "title":
        return css_string(project_name)
    if opts.header_content == "custom" and opts.custom_header_text.strip():
        return css_string(opts.custom_header_text)
    return None


def _footer_content(opts: ExportConfig) -> str | None:
    if opts.footer_content == "pageNumber":
        return "counter(page)"
    if opts.footer_content == "custom" and opts.custom_footer_text.strip():
        return css_string(opts.custom_footer_text)
    return None


def css_string(text: str) -> str:
    """Quote text as a CSS string literal that cannot close the style element."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("<", "\\3C ").replace("\n", "\\A ")
    return f'"{escaped}"'
