"""Fetch article HTML and revision metadata from Wikipedia."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence
from urllib.parse import quote

import httpx

from wikicompiler.cache_utils import (
    article_cache_path,
    is_cache_fresh,
    read_text_async,
    write_text_async,
)
from wikicompiler.config import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    WIKICOMPILER_CACHE_PATH,
    WIKICOMPILER_CACHE_TTL_SECONDS,
    WIKICOMPILER_LANGUAGE,
)
from wikicompiler.exceptions import ArticleNotFoundError, FetchError
from wikicompiler.html_utils import extract_body_html
from wikicompiler.http_utils import create_client, fetch_with_retries
from wikicompiler.schemas import ArticleMetadata

logger = logging.getLogger(__name__)

# The Action API accepts at most this many titles per query.
METADATA_BATCH_SIZE = 50


def resolve_language(language: str | None) -> str:
    """Return ``language`` if supported, otherwise the default language."""
    if language in SUPPORTED_LANGUAGES:
        return language
    return DEFAULT_LANGUAGE


class WikipediaClient:
    """Default article and metadata collaborators for exports.

    Can be used directly, in which case each request opens its own HTTP
    client, or as an async context manager to pool connections.
    """

    def __init__(
        self,
        language: str | None = WIKICOMPILER_LANGUAGE,
        *,
        client: httpx.AsyncClient | None = None,
        use_cache: bool = True,
        cache_path: Path = WIKICOMPILER_CACHE_PATH,
        cache_ttl_seconds: int = WIKICOMPILER_CACHE_TTL_SECONDS,
    ) -> None:
        self.language = resolve_language(language)
        self.use_cache = use_cache
        self.cache_path = cache_path
        self.cache_ttl_seconds = cache_ttl_seconds
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> "WikipediaClient":
        if self._client is None:
            self._client = create_client()
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    @property
    def base_url(self) -> str:
        return f"https://{self.language}.wikipedia.org"

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/w/api.php"

    def rest_html_url(self, title: str) -> str:
        return f"{self.base_url}/api/rest_v1/page/html/{quote(title.replace(' ', '_'), safe='')}"

    async def fetch_article_html(self, title: str) -> str:
        """Return the body HTML of an article, from cache when fresh.

        Raises:
            ArticleNotFoundError: If Wikipedia has no page with this title.
            FetchError: If the request fails after retries.
        """
        cache_file = article_cache_path(title, self.language, self.cache_path)
        if self.use_cache and is_cache_fresh(cache_file, self.cache_ttl_seconds):
            logger.debug("Cache hit for %r", title)
            return await read_text_async(cache_file)

        html = await fetch_with_retries(
            self.rest_html_url(title),
            client=self._client,
            on_404=ArticleNotFoundError,
            on_404_message=f"Failed to fetch article: {title}",
        )
        content = extract_body_html(html)
        if self.use_cache:
            await write_text_async(cache_file, content)
        return content

    async def fetch_article_metadata(self, titles: Sequence[str]) -> list[ArticleMetadata]:
        """Look up revision metadata for ``titles`` in batches.

        Titles Wikipedia cannot resolve are left out of the result.

        Raises:
            FetchError: If a batch request fails or returns malformed data.
        """
        metadata: list[ArticleMetadata] = []
        unique_titles = list(dict.fromkeys(title for title in titles if title.strip()))
        for start in range(0, len(unique_titles), METADATA_BATCH_SIZE):
            batch = unique_titles[start:start + METADATA_BATCH_SIZE]
            metadata.extend(await self._fetch_metadata_batch(batch))
        return metadata

    async def _fetch_metadata_batch(self, titles: list[str]) -> list[ArticleMetadata]:
        params = {
            "action": "query",
            "prop": "info",
            "titles": "|".join(titles),
            "format": "json",
            "formatversion": "2",
            "origin": "*",
        }
        body = await fetch_with_retries(self.api_url, client=self._client, params=params)
        try:
            pages = json.loads(body)["query"]["pages"]
        except (ValueError, KeyError, TypeError) as exc:
            raise FetchError(f"Unexpected metadata response from {self.api_url}") from exc
        return parse_metadata_pages(pages)


def parse_metadata_pages(pages: list[dict]) -> list[ArticleMetadata]:
    """Convert Action API ``prop=info`` pages, skipping missing or invalid ones."""
    result: list[ArticleMetadata] = []
    for page in pages:
        if page.get("missing") or page.get("invalid") or "lastrevid" not in page:
            logger.debug("Skipping unresolved page %r", page.get("title"))
            continue
        result.append(
            ArticleMetadata(
                pageid=page["pageid"],
                revid=page["lastrevid"],
                touched=page["touched"],
                title=page["title"],
            )
        )
    return result
