"""In-memory registry of parsed feeds.

The registry is a plain object owned by whoever drives the engine (the HTTP
server, the MCP server, a test).  It offers:

* ``add`` / ``get`` / ``get_all`` / ``remove`` – manage feeds keyed by source URL.
* ``export`` / ``export_json`` – a compact summary with item *counts* instead of
  the items themselves.

Nothing is persisted; a registry lives as long as its owner.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional

from feedlens.main.tools.models import Feed


def _format_timestamp(ts: datetime) -> str:
    """ISO 8601 UTC with a ``Z`` suffix."""
    return ts.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class FeedRegistry:
    """Mapping of feed URL to ``Feed``; insertion ordered, last write wins."""

    def __init__(self) -> None:
        self._feeds: Dict[str, Feed] = {}
        self._lock = Lock()

    def add(self, url: str, feed: Feed) -> None:
        """Store *feed* under *url*, replacing any previous feed for that URL."""
        with self._lock:
            self._feeds[url] = feed

    def get(self, url: str) -> Optional[Feed]:
        with self._lock:
            return self._feeds.get(url)

    def get_all(self) -> List[Feed]:
        """Return all feeds in the order their URLs were first added."""
        with self._lock:
            return list(self._feeds.values())

    def urls(self) -> List[str]:
        with self._lock:
            return list(self._feeds)

    def remove(self, url: str) -> bool:
        """Drop the feed for *url*.  Returns ``False`` if it was not registered."""
        with self._lock:
            return self._feeds.pop(url, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._feeds)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._feeds

    def export(self) -> Dict[str, Dict[str, object]]:
        """Summarise every feed as ``{url: {title, description, link, lastUpdated, items, articles}}``.

        ``items`` is the number of entries, never the entries themselves.
        """
        with self._lock:
            snapshot = list(self._feeds.items())
        return {
            url: {
                "title": feed.title,
                "description": feed.description,
                "link": feed.link,
                "lastUpdated": _format_timestamp(feed.last_updated),
                "items": len(feed.items),
                "articles": feed.articles,
            }
            for url, feed in snapshot
        }

    def export_json(self) -> str:
        return json.dumps(self.export(), indent=2)
