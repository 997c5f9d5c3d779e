"""Tests for JSON and plain-text output."""

from __future__ import annotations

import json

from wikicompiler.output_formatter import to_json, to_plain_text
from wikicompiler.schemas import SECTION_BREAK, Project, Section, SectionKind


class TestToJson:
    """Tests for the structural JSON dump."""

    def test_shape(self) -> None:
        """Project name, notes and article HTML are included in order."""
        project = Project(id="p1", name="Cities", notes="Überblick")
        articles = [
            Section(kind=SectionKind.ARTICLE, title="Rome", html="<p>Rome</p>"),
            Section(kind=SectionKind.ARTICLE, title="Paris", html="<p>Paris</p>"),
        ]
        text = to_json(project, articles)

        assert json.loads(text) == {
            "projectName": "Cities",
            "projectNotes": "Überblick",
            "articles": [
                {"title": "Rome", "html": "<p>Rome</p>"},
                {"title": "Paris", "html": "<p>Paris</p>"},
            ],
        }
        assert "Überblick" in text
        assert text.startswith('{\n  "projectName"')

    def test_missing_notes(self) -> None:
        """Absent notes are an empty string."""
        assert json.loads(to_json(Project(id="p1", name="X"), []))["projectNotes"] == ""


class TestToPlainText:
    """Tests for the plain-text dump."""

    def test_blocks_separated_by_blank_lines(self) -> None:
        """Markup is stripped and blocks become paragraphs."""
        html = "<h1>Rome</h1><p>The <b>capital</b>.</p><ul><li>a<ul><li>b</li></ul></li></ul>"
        assert to_plain_text(html) == "Rome\n\nThe capital.\n\n- a\n\n  - b"

    def test_sections(self) -> None:
        """Sections are separated like any other block."""
        html = f"<p>one</p>{SECTION_BREAK}<p>two</p>"
        assert to_plain_text(html) == "one\n\ntwo"
