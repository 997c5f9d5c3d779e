"""Tests for document assembly."""

from __future__ import annotations

import pytest

from wikicompiler.assembler import (
    NOTES_TITLE,
    assemble_sections,
    build_notes_section,
    sections_to_html,
    split_sections,
)
from wikicompiler.exceptions import ArticleFetchError, ArticleNotFoundError
from wikicompiler.schemas import SECTION_BREAK, ExportConfig, Project, ProjectArticle, SectionKind

NO_BIBLIOGRAPHY = ExportConfig(include_bibliography=False)


class TestAssembleSections:
    """Tests for section ordering and content."""

    @pytest.mark.asyncio
    async def test_articles_in_project_order(self, project, fetch_article_html) -> None:
        """Without notes or bibliography there is one section per article."""
        sections = await assemble_sections(project, fetch_article_html, config=NO_BIBLIOGRAPHY)

        assert [s.kind for s in sections] == [SectionKind.ARTICLE, SectionKind.ARTICLE]
        assert [s.title for s in sections] == ["Rome", "Paris"]
        assert sections[1].html == "<p>Paris is <i>the</i> capital of France.</p>"

    @pytest.mark.asyncio
    async def test_notes_first_and_bibliography_last(
        self, project, fetch_article_html, fetch_metadata
    ) -> None:
        """Notes lead the document and the bibliography closes it."""
        with_notes = project.model_copy(update={"notes": "Read these first."})
        sections = await assemble_sections(
            with_notes, fetch_article_html, fetch_metadata=fetch_metadata
        )

        assert [s.kind for s in sections] == [
            SectionKind.NOTES,
            SectionKind.ARTICLE,
            SectionKind.ARTICLE,
            SectionKind.BIBLIOGRAPHY,
        ]
        assert sections[0].title == NOTES_TITLE
        assert "Retrieved May 4, 2023" in sections[-1].html

    @pytest.mark.asyncio
    async def test_citation_style_override(
        self, project, fetch_article_html, fetch_metadata
    ) -> None:
        """An explicit citation style wins over the config's."""
        sections = await assemble_sections(
            project,
            fetch_article_html,
            config=ExportConfig(citation_style="apa"),
            fetch_metadata=fetch_metadata,
            citation_style="mla",
        )
        assert "Wikipedia, The Free Encyclopedia" in sections[-1].html

    @pytest.mark.asyncio
    async def test_empty_project(self, fetch_article_html) -> None:
        """A project without articles or notes assembles to nothing."""
        empty = Project(id="p0", name="Empty")
        assert await assemble_sections(empty, fetch_article_html, config=NO_BIBLIOGRAPHY) == []

    @pytest.mark.asyncio
    async def test_bibliography_requires_metadata_lookup(self, project, fetch_article_html) -> None:
        """Requesting a bibliography without a metadata lookup is a usage error."""
        with pytest.raises(ValueError, match="fetch_metadata"):
            await assemble_sections(project, fetch_article_html)


class TestFetchFailures:
    """Tests for failing article fetches."""

    @pytest.mark.asyncio
    async def test_failure_raises_article_fetch_error(self, article_html) -> None:
        """A failing fetch aborts assembly and names the article."""

        async def fetch(title: str) -> str:
            if title == "Paris":
                raise ConnectionError("timed out")
            return article_html[title]

        project = Project(
            id="p1",
            name="Cities",
            articles=[ProjectArticle(title="Rome"), ProjectArticle(title="Paris")],
        )
        with pytest.raises(ArticleFetchError, match="Paris") as exc_info:
            await assemble_sections(project, fetch, config=NO_BIBLIOGRAPHY)

        assert exc_info.value.title == "Paris"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_fetch_error_subclass_is_wrapped(self) -> None:
        """Domain fetch errors are also reported as ArticleFetchError."""

        async def fetch(title: str) -> str:
            raise ArticleNotFoundError(f"Article not found: {title}")

        project = Project(id="p1", name="Cities", articles=[ProjectArticle(title="Atlantis")])
        with pytest.raises(ArticleFetchError) as exc_info:
            await assemble_sections(project, fetch, config=NO_BIBLIOGRAPHY)
        assert isinstance(exc_info.value.__cause__, ArticleNotFoundError)

    @pytest.mark.asyncio
    async def test_fetches_stop_at_first_failure(self) -> None:
        """Articles after a failure are never requested."""
        requested: list[str] = []

        async def fetch(title: str) -> str:
            requested.append(title)
            raise RuntimeError("boom")

        project = Project(
            id="p1",
            name="Cities",
            articles=[ProjectArticle(title="Rome"), ProjectArticle(title="Paris")],
        )
        with pytest.raises(ArticleFetchError):
            await assemble_sections(project, fetch, config=NO_BIBLIOGRAPHY)
        assert requested == ["Rome"]


class TestNotesSection:
    """Tests for the notes section."""

    def test_blank_notes(self) -> None:
        """Missing or whitespace-only notes produce no section."""
        assert build_notes_section(None) is None
        assert build_notes_section("  \n ") is None

    def test_lines_are_escaped_and_broken(self) -> None:
        """Each line is escaped and separated by a line break."""
        section = build_notes_section("a < b\nsecond")
        assert section is not None
        assert section.html == "<p>a &lt; b<br>second</p>"


class TestSectionHtml:
    """Tests for combining and splitting section HTML."""

    @pytest.mark.asyncio
    async def test_round_trip_through_breaks(self, project, fetch_article_html) -> None:
        """Joined sections split back into the same fragments."""
        sections = await assemble_sections(project, fetch_article_html, config=NO_BIBLIOGRAPHY)
        combined = sections_to_html(sections)

        assert combined.count(SECTION_BREAK) == 1
        assert split_sections(combined) == [s.to_html() for s in sections]

    def test_split_drops_empty_pieces(self) -> None:
        """Leading, trailing and doubled breaks leave no empty fragments."""
        html = f"{SECTION_BREAK}<p>a</p>{SECTION_BREAK}{SECTION_BREAK} <p>b</p>{SECTION_BREAK}"
        assert split_sections(html) == ["<p>a</p>", " <p>b</p>"]
