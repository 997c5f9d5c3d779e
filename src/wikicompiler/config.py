"""Local configuration for wikicompiler."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_CACHE_DIR = ".wikicompiler_cache"
DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_BACKOFF_S = 0.5
DEFAULT_USER_AGENT = "wikicompiler/0.1 (+https://github.com/wikicompiler/wikicompiler)"
DEFAULT_LANGUAGE = "en"

SUPPORTED_LANGUAGES = ("en", "de")

# Local-only cache directory for fetched article HTML.
WIKICOMPILER_CACHE_PATH = Path(os.getenv("WIKICOMPILER_CACHE_PATH", DEFAULT_CACHE_DIR)).expanduser().resolve()
WIKICOMPILER_CACHE_TTL_SECONDS = int(os.getenv("WIKICOMPILER_CACHE_TTL_SECONDS", str(DEFAULT_CACHE_TTL_SECONDS)))
WIKICOMPILER_FETCH_TIMEOUT_S = float(os.getenv("WIKICOMPILER_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
WIKICOMPILER_FETCH_MAX_RETRIES = int(os.getenv("WIKICOMPILER_FETCH_MAX_RETRIES", str(DEFAULT_FETCH_MAX_RETRIES)))
WIKICOMPILER_FETCH_BACKOFF_S = float(os.getenv("WIKICOMPILER_FETCH_BACKOFF_S", str(DEFAULT_FETCH_BACKOFF_S)))
WIKICOMPILER_USER_AGENT = os.getenv("WIKICOMPILER_USER_AGENT", DEFAULT_USER_AGENT)
WIKICOMPILER_LANGUAGE = os.getenv("WIKICOMPILER_LANGUAGE", DEFAULT_LANGUAGE)
