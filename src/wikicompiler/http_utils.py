"""HTTP utilities for fetching content with retry logic and connection pooling."""

from __future__ import annotations

import asyncio
import logging
from typing import Final, Mapping

import httpx

from wikicompiler.config import (
    WIKICOMPILER_FETCH_BACKOFF_S,
    WIKICOMPILER_FETCH_MAX_RETRIES,
    WIKICOMPILER_FETCH_TIMEOUT_S,
    WIKICOMPILER_USER_AGENT,
)
from wikicompiler.exceptions import FetchError, RateLimitError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

_MAX_REDIRECTS: Final[int] = 5


def create_client() -> httpx.AsyncClient:
    """Create an ``AsyncClient`` with the project's timeout, headers and redirects."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(WIKICOMPILER_FETCH_TIMEOUT_S),
        headers={"User-Agent": WIKICOMPILER_USER_AGENT},
        follow_redirects=True,
        max_redirects=_MAX_REDIRECTS,
    )


async def fetch_with_retries(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    params: Mapping[str, str] | None = None,
    on_404: type[Exception] | None = None,
    on_404_message: str | None = None,
) -> str:
    """Fetch text from a URL, retrying transient failures with exponential backoff.

    Args:
        url: The URL to fetch.
        client: Optional httpx.AsyncClient for connection pooling. If not
            provided, a new client is created for this request.
        params: Optional query parameters.
        on_404: Custom exception class to raise on 404. Defaults to FetchError.
        on_404_message: Custom error message for 404 responses. If None,
            a generic message is used.

    Returns:
        The response body as text.

    Raises:
        RateLimitError: If the server still answers 429 after all retries.
        FetchError (or custom on_404 exception): If the fetch fails after all
            retries or returns 404.
    """
    last_exc: Exception | None = None
    not_found_exc_class = on_404 or FetchError

    async def do_fetch(http_client: httpx.AsyncClient) -> str:
        nonlocal last_exc

        for attempt in range(WIKICOMPILER_FETCH_MAX_RETRIES + 1):
            try:
                response = await http_client.get(url, params=params)

                if response.status_code == 404:
                    message = on_404_message or f"Resource not found at {url}"
                    raise not_found_exc_class(message)

                if response.status_code in RETRY_STATUS_CODES:
                    error_class = RateLimitError if response.status_code == 429 else FetchError
                    last_exc = error_class(f"HTTP {response.status_code} from {url}")
                else:
                    response.raise_for_status()
                    return response.text
            except (httpx.RequestError, httpx.HTTPStatusError) as exc:
                last_exc = exc
            except not_found_exc_class:
                raise

            if attempt < WIKICOMPILER_FETCH_MAX_RETRIES:
                backoff = WIKICOMPILER_FETCH_BACKOFF_S * (2**attempt)
                logger.debug("Retrying %s in %.2fs after %s", url, backoff, last_exc)
                await asyncio.sleep(backoff)

        if isinstance(last_exc, RateLimitError):
            raise last_exc
        raise FetchError(f"Failed to fetch {url}: {last_exc}")

    if client is not None:
        return await do_fetch(client)

    async with create_client() as new_client:
        return await do_fetch(new_client)
