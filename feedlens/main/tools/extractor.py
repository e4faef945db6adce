"""Fetch, parse and register feeds.

``FeedExtractor`` is the object callers hold on to.  It owns one ``Fetcher``
and one ``FeedRegistry``; nothing here is module-global, so every server or
test gets its own isolated set of feeds.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from feedlens.main import config
from feedlens.main.tools.feed_parser import ParseError, parse_feed
from feedlens.main.tools.fetcher import FetchError, Fetcher
from feedlens.main.tools.models import Feed
from feedlens.main.tools.registry import FeedRegistry

logger = logging.getLogger(__name__)


class FeedExtractor:
    def __init__(
        self,
        registry: Optional[FeedRegistry] = None,
        fetcher: Optional[Fetcher] = None,
        *,
        articles: int | None = None,
    ) -> None:
        self.registry = registry if registry is not None else FeedRegistry()
        self.fetcher = fetcher if fetcher is not None else Fetcher()
        self.articles = config.DEFAULT_ARTICLES if articles is None else articles

    async def fetch_feed(self, url: str) -> Feed:
        """Fetch *url*, parse it and store the result in the registry.

        ``FetchError`` and ``ParseError`` propagate unchanged; in both cases the
        registry keeps whatever it held for *url* before the call.
        """
        text = await self.fetcher.fetch(url)
        try:
            return self.parse_feed(text, url)
        except ParseError as exc:
            logger.error("Failed to parse feed %s: %s", url, exc)
            raise

    def parse_feed(self, document_text: str, url: str) -> Feed:
        """Parse an already retrieved document and register it under *url*."""
        return parse_feed(document_text, url, self.registry, articles=self.articles)

    async def fetch_feeds(
        self, urls: Iterable[str]
    ) -> Tuple[List[Feed], Dict[str, Exception]]:
        """Fetch several feeds concurrently.

        Returns ``(feeds, errors)`` where ``feeds`` holds the successfully parsed
        feeds in the order of *urls* and ``errors`` maps each failed URL to its
        ``FetchError``/``ParseError``.
        """
        urls = list(urls)
        results = await asyncio.gather(
            *(self.fetch_feed(url) for url in urls), return_exceptions=True
        )
        feeds: List[Feed] = []
        errors: Dict[str, Exception] = {}
        for url, result in zip(urls, results):
            if isinstance(result, (FetchError, ParseError)):
                logger.warning("Skipping feed %s: %s", url, result)
                errors[url] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                feeds.append(result)
        logger.info("Loaded %d of %d feeds", len(feeds), len(urls))
        return feeds, errors

    def get_feed(self, url: str) -> Optional[Feed]:
        return self.registry.get(url)

    def get_all_feeds(self) -> List[Feed]:
        return self.registry.get_all()

    def remove_feed(self, url: str) -> bool:
        removed = self.registry.remove(url)
        if removed:
            logger.info("Removed feed %s", url)
        return removed

    def set_articles(self, url: str, articles: int) -> Feed:
        """Change the display window of a registered feed.

        Raises ``KeyError`` for unknown URLs and pydantic's ``ValidationError``
        when *articles* is below 1.
        """
        feed = self.registry.get(url)
        if feed is None:
            raise KeyError(url)
        feed.articles = articles
        return feed

    def export(self) -> Dict[str, Dict[str, object]]:
        return self.registry.export()

    def export_json(self) -> str:
        return self.registry.export_json()

    async def aclose(self) -> None:
        await self.fetcher.aclose()
