"""Tests for the Wikipedia client."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from wikicompiler.cache_utils import article_cache_path
from wikicompiler.exceptions import ArticleNotFoundError, FetchError
from wikicompiler.wikipedia import (
    METADATA_BATCH_SIZE,
    WikipediaClient,
    parse_metadata_pages,
    resolve_language,
)

ARTICLE_PAGE = "<html><head><title>Rome</title></head><body><p>Rome <img src='a.png'></p></body></html>"


def _page(title: str, revid: int = 100) -> dict:
    return {
        "pageid": revid,
        "ns": 0,
        "title": title,
        "touched": "2023-05-04T12:00:00Z",
        "lastrevid": revid,
    }


class TestResolveLanguage:
    """Tests for resolve_language."""

    def test_supported(self) -> None:
        """Supported languages pass through."""
        assert resolve_language("de") == "de"

    def test_unsupported_falls_back(self) -> None:
        """Unknown or missing languages fall back to English."""
        assert resolve_language("fr") == "en"
        assert resolve_language(None) == "en"


class TestUrls:
    """Tests for endpoint construction."""

    def test_rest_html_url_encodes_title(self) -> None:
        """Titles are underscored and fully percent-encoded."""
        client = WikipediaClient("en")
        assert client.rest_html_url("AC/DC band") == (
            "https://en.wikipedia.org/api/rest_v1/page/html/AC%2FDC_band"
        )

    def test_api_url_follows_language(self) -> None:
        """The Action API endpoint uses the client's language."""
        assert WikipediaClient("de").api_url == "https://de.wikipedia.org/w/api.php"


class TestFetchArticleHtml:
    """Tests for article HTML fetching."""

    @pytest.mark.asyncio
    async def test_returns_body_html(self, tmp_path: Path) -> None:
        """Only the body's inner HTML is returned, with lazy images."""
        client = WikipediaClient("en", cache_path=tmp_path)
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock(return_value=ARTICLE_PAGE)
        ) as mock_fetch:
            html = await client.fetch_article_html("Rome")

        assert html.startswith("<p>Rome <img loading=\"lazy\" decoding=\"async\" ")
        assert "<title>" not in html
        assert mock_fetch.call_args.kwargs["on_404"] is ArticleNotFoundError

    @pytest.mark.asyncio
    async def test_cache_is_written_and_reused(self, tmp_path: Path) -> None:
        """A second fetch within the TTL is served from disk."""
        client = WikipediaClient("en", cache_path=tmp_path)
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock(return_value=ARTICLE_PAGE)
        ) as mock_fetch:
            first = await client.fetch_article_html("Rome")
            second = await client.fetch_article_html("Rome")

        assert first == second
        assert mock_fetch.call_count == 1
        assert article_cache_path("Rome", "en", tmp_path).exists()

    @pytest.mark.asyncio
    async def test_cache_disabled(self, tmp_path: Path) -> None:
        """With caching off every call hits the network and nothing is written."""
        client = WikipediaClient("en", cache_path=tmp_path, use_cache=False)
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock(return_value=ARTICLE_PAGE)
        ) as mock_fetch:
            await client.fetch_article_html("Rome")
            await client.fetch_article_html("Rome")

        assert mock_fetch.call_count == 2
        assert not article_cache_path("Rome", "en", tmp_path).exists()

    @pytest.mark.asyncio
    async def test_missing_article_propagates(self, tmp_path: Path) -> None:
        """A 404 surfaces as ArticleNotFoundError."""
        client = WikipediaClient("en", cache_path=tmp_path)
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries",
            new=AsyncMock(side_effect=ArticleNotFoundError("Failed to fetch article: Atlantis")),
        ):
            with pytest.raises(ArticleNotFoundError, match="Atlantis"):
                await client.fetch_article_html("Atlantis")


class TestFetchArticleMetadata:
    """Tests for metadata lookups."""

    @pytest.mark.asyncio
    async def test_parses_pages(self) -> None:
        """Resolved pages become ArticleMetadata with lastrevid as revision."""
        body = json.dumps({"query": {"pages": [_page("Rome", 123)]}})
        client = WikipediaClient("en")
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock(return_value=body)
        ) as mock_fetch:
            metadata = await client.fetch_article_metadata(["Rome"])

        assert len(metadata) == 1
        assert metadata[0].revid == 123
        assert metadata[0].touched == datetime(2023, 5, 4, 12, tzinfo=timezone.utc)
        params = mock_fetch.call_args.kwargs["params"]
        assert params["titles"] == "Rome"
        assert params["prop"] == "info"

    @pytest.mark.asyncio
    async def test_batches_and_deduplicates(self) -> None:
        """Titles are deduplicated and sent in batches."""
        titles = [f"T{i}" for i in range(METADATA_BATCH_SIZE + 5)] + ["T0"]

        async def fake_fetch(url: str, **kwargs: object) -> str:
            batch = kwargs["params"]["titles"].split("|")  # type: ignore[index]
            return json.dumps({"query": {"pages": [_page(t) for t in batch]}})

        client = WikipediaClient("en")
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock(side_effect=fake_fetch)
        ) as mock_fetch:
            metadata = await client.fetch_article_metadata(titles)

        assert mock_fetch.call_count == 2
        assert len(metadata) == METADATA_BATCH_SIZE + 5

    @pytest.mark.asyncio
    async def test_malformed_response(self) -> None:
        """Unexpected JSON is reported as FetchError."""
        client = WikipediaClient("en")
        with patch(
            "wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock(return_value='{"error": {}}')
        ):
            with pytest.raises(FetchError, match="Unexpected metadata response"):
                await client.fetch_article_metadata(["Rome"])

    @pytest.mark.asyncio
    async def test_empty_titles_skip_request(self) -> None:
        """No titles means no request."""
        client = WikipediaClient("en")
        with patch("wikicompiler.wikipedia.fetch_with_retries", new=AsyncMock()) as mock_fetch:
            assert await client.fetch_article_metadata([]) == []
        mock_fetch.assert_not_called()


class TestParseMetadataPages:
    """Tests for parse_metadata_pages."""

    def test_skips_missing_and_invalid(self) -> None:
        """Missing, invalid and revisionless pages are dropped."""
        pages = [
            _page("Rome"),
            {"ns": 0, "title": "Atlantis", "missing": True},
            {"title": "<bad>", "invalid": True, "invalidreason": "bad"},
            {"pageid": 5, "title": "Odd", "touched": "2023-01-01T00:00:00Z"},
        ]
        assert [meta.title for meta in parse_metadata_pages(pages)] == ["Rome"]


class TestContextManager:
    """Tests for connection pooling."""

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self) -> None:
        """A client opened by the context manager is closed on exit."""
        with patch("wikicompiler.wikipedia.create_client") as mock_create:
            http_client = AsyncMock()
            mock_create.return_value = http_client

            async with WikipediaClient("en") as client:
                assert client._client is http_client

        http_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self) -> None:
        """A caller-provided client is not closed."""
        http_client = AsyncMock()
        async with WikipediaClient("en", client=http_client):
            pass
        http_client.aclose.assert_not_awaited()
