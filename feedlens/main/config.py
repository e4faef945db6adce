"""Runtime settings for FeedLens.

Values are read from the environment once at import time.  A ``.env`` file in
the working directory is honoured through ``python-dotenv`` so local setups do
not need to export anything by hand.
"""

from __future__ import annotations

import logging
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _list_env(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


# Relay endpoint prepended to every feed URL. Empty string means direct access.
RELAY_PREFIX: str = os.getenv("FEEDLENS_RELAY_PREFIX", "https://thingproxy.freeboard.io/fetch/")
HTTP_TIMEOUT: float = _float_env("FEEDLENS_HTTP_TIMEOUT", 10.0)
DEFAULT_ARTICLES: int = _int_env("FEEDLENS_DEFAULT_ARTICLES", 5)
DEFAULT_FEEDS: List[str] = _list_env(
    "FEEDLENS_DEFAULT_FEEDS",
    [
        "https://rss.nytimes.com/services/xml/rss/nyt/HomePage.xml",
        "https://feeds.theguardian.com/theguardian/world/rss",
        "https://engineering.fb.com/feed/",
        "https://blog.cloudflare.com/rss/",
        "https://stackoverflow.blog/feed/",
    ],
)
LOG_LEVEL: str = os.getenv("FEEDLENS_LOG_LEVEL", "INFO").upper()
API_HOST: str = os.getenv("FEEDLENS_API_HOST", "127.0.0.1")
API_PORT: int = _int_env("FEEDLENS_API_PORT", 8090)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the entry points (servers, scripts)."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
