"""Test setup for wikicompiler."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from wikicompiler.schemas import ArticleMetadata, Project, ProjectArticle  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (make real network calls)",
    )


@pytest.fixture
def article_html() -> dict[str, str]:
    """Body HTML for the sample project's articles."""
    return {
        "Rome": (
            "<p>Rome is the <b>capital</b> of <a href=\"https://en.wikipedia.org/wiki/Italy\">Italy</a>.</p>"
            "<h2>History</h2><ul><li>Founded in 753 BC</li><li>Empire</li></ul>"
        ),
        "Paris": "<p>Paris is <i>the</i> capital of France.</p>",
    }


@pytest.fixture
def project() -> Project:
    """A project with two articles and no notes."""
    return Project(
        id="p1",
        name="My Compilation",
        articles=[ProjectArticle(title="Rome"), ProjectArticle(title="Paris")],
    )


@pytest.fixture
def fetch_article_html(article_html: dict[str, str]):
    """Async article collaborator backed by ``article_html``."""

    async def _fetch(title: str) -> str:
        return article_html[title]

    return _fetch


@pytest.fixture
def fetch_metadata():
    """Async metadata collaborator returning fixed revisions."""
    revisions = {
        "Rome": ArticleMetadata(
            pageid=1, revid=123, touched=datetime(2023, 5, 4, tzinfo=timezone.utc), title="Rome"
        ),
        "Paris": ArticleMetadata(
            pageid=2, revid=456, touched=datetime(2022, 1, 15, tzinfo=timezone.utc), title="Paris"
        ),
    }

    async def _fetch(titles: list[str]) -> list[ArticleMetadata]:
        return [revisions[title] for title in titles if title in revisions]

    return _fetch
