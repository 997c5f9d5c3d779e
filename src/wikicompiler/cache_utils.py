"""Cache utilities for managing local file caching."""

from __future__ import annotations

import asyncio
import hashlib
import re
from datetime import datetime, timezone
from pathlib import Path

_UNSAFE_CHARS_RE = re.compile(r"[^\w.\-]+")
_MAX_STEM_LENGTH = 80


def is_cache_fresh(path: Path, ttl_seconds: int) -> bool:
    """Check if a cached file is still fresh based on its modification time.

    Args:
        path: Path to the cached file.
        ttl_seconds: Time-to-live in seconds. If <= 0, cache is considered
            fresh indefinitely (cache forever mode).

    Returns:
        True if the cache is fresh and usable, False otherwise.
    """
    if not path.exists():
        return False
    if ttl_seconds <= 0:
        return True
    mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    age_seconds = (datetime.now(timezone.utc) - mtime).total_seconds()
    return age_seconds <= ttl_seconds


def article_cache_path(title: str, language: str, base_path: Path) -> Path:
    """Get the cache file path for an article's HTML.

    Titles are reduced to a filesystem-safe stem; a short hash of the exact
    title keeps distinct titles (e.g. differing only in punctuation) apart.

    Args:
        title: The article title (spaces or underscores).
        language: Wikipedia language code.
        base_path: The base cache directory path.

    Returns:
        Path to the cached HTML file for this article.
    """
    normalized = title.strip().replace(" ", "_")
    stem = _UNSAFE_CHARS_RE.sub("_", normalized)[:_MAX_STEM_LENGTH].strip("_") or "article"
    digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()[:8]
    return base_path / language / f"{stem}__{digest}.html"


async def read_text_async(path: Path, encoding: str = "utf-8") -> str:
    """Read text from a file asynchronously using a thread pool."""
    return await asyncio.to_thread(path.read_text, encoding=encoding)


async def write_text_async(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text to a file asynchronously, creating parent directories.

    Args:
        path: Path to the file to write.
        content: Text content to write.
        encoding: Text encoding to use.
    """
    await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(path.write_text, content, encoding=encoding)
