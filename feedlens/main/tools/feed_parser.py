"""Turn RSS 2.0 and Atom documents into ``Feed`` objects.

The document is parsed twice: once with ``xml.etree.ElementTree`` to reject
anything that is not well-formed XML, and once with BeautifulSoup's ``xml``
builder (lxml) for the actual field extraction, which needs element prefixes.

Only structural problems raise ``ParseError``.  Missing or broken fields fall
back to defaults so a single bad entry never costs the rest of the feed.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, NamedTuple, Optional, Set, Tuple
from xml.etree import ElementTree

from bs4 import BeautifulSoup, Tag

from feedlens.main import config
from feedlens.main.tools.feed_utils import (
    element_markup,
    element_text,
    html_to_text,
    parse_date,
    select_all,
    select_one,
    select_path,
)
from feedlens.main.tools.models import Feed, FeedItem

if TYPE_CHECKING:
    from feedlens.main.tools.registry import FeedRegistry

logger = logging.getLogger(__name__)

UNTITLED_ITEM = "No title"


class ParseError(Exception):
    """The document is not well-formed XML or not a recognised feed."""


class Dialect(Enum):
    RSS = "rss"
    ATOM = "atom"


class DialectFields(NamedTuple):
    """Element names for one dialect.  Tuples are fallback chains."""

    container: str
    entry: str
    feed_description: str
    item_id: str
    item_description: Tuple[str, ...]
    author: Tuple[str, ...]
    published: Tuple[str, ...]
    # Attribute holding the link URL; ``None`` means the element text.
    link_attr: Optional[str]
    # Attribute holding a category label when the element has no text.
    category_attr: Optional[str]


DIALECTS = {
    Dialect.RSS: DialectFields(
        container="channel",
        entry="item",
        feed_description="description",
        item_id="guid",
        item_description=("description", "content:encoded"),
        author=("author", "dc:creator"),
        published=("pubDate", "dc:date"),
        link_attr=None,
        category_attr=None,
    ),
    Dialect.ATOM: DialectFields(
        container="feed",
        entry="entry",
        feed_description="subtitle",
        item_id="id",
        item_description=("summary", "content"),
        author=("author/name",),
        published=("published", "updated"),
        link_attr="href",
        category_attr="term",
    ),
}


def detect_dialect(soup: BeautifulSoup) -> Tuple[Dialect, Tag]:
    """Return the dialect and its container element.

    Only the root element and its direct children are considered, so a
    ``feed`` element nested inside an RSS item does not change the dialect.
    An Atom ``feed`` wins over an RSS ``channel`` when both are present.
    """
    root = soup.find(True, recursive=False)
    if root is None:
        raise ParseError("unrecognized feed format")
    candidates = [root] + root.find_all(True, recursive=False)
    for dialect in (Dialect.ATOM, Dialect.RSS):
        for container in candidates:
            if container.name == DIALECTS[dialect].container:
                return dialect, container
    raise ParseError("unrecognized feed format")


def _read_link(parent: Tag, fields: DialectFields) -> str:
    links = select_all(parent, "link", recursive=False)
    if fields.link_attr is None:
        return element_text(links[0]) if links else ""
    # Atom: the alternate link is the human-facing one.
    for link in links:
        if link.get("rel", "alternate") == "alternate" and link.get(fields.link_attr):
            return link[fields.link_attr].strip()
    for link in links:
        if link.get(fields.link_attr):
            return link[fields.link_attr].strip()
    return ""


def _first_value(
    parent: Tag, paths: Tuple[str, ...], read: Callable[[Optional[Tag]], str]
) -> str:
    # Every exact name in the chain is tried before any foreign-prefixed
    # element (itunes:author) can stand in for a plain one.
    for exact in (True, False):
        for path in paths:
            value = read(select_path(parent, path, exact=exact))
            if value:
                return value
    return ""


def _first_text(parent: Tag, paths: Tuple[str, ...]) -> str:
    return _first_value(parent, paths, element_text)


def _read_categories(item: Tag, fields: DialectFields) -> list[str]:
    categories = []
    for tag in select_all(item, "category", recursive=False):
        label = element_text(tag)
        if not label and fields.category_attr:
            label = (tag.get(fields.category_attr) or "").strip()
        if label:
            categories.append(label)
    return categories


def extract_image_url(item: Tag) -> Optional[str]:
    """Best-effort image for an entry: media element, image enclosure, RSS image."""
    # Document order across both media element kinds.
    media_tags = [
        tag for tag in item.find_all(["content", "thumbnail"]) if tag.prefix == "media"
    ]
    for media in media_tags:
        url = (media.get("url") or "").strip()
        if url:
            return url

    for enclosure in select_all(item, "enclosure"):
        if (enclosure.get("type") or "").startswith("image/"):
            url = (enclosure.get("url") or "").strip()
            if url:
                return url

    image = select_one(item, "image")
    if image is not None:
        url = element_text(select_one(image, "url"))
        if url:
            return url
    return None


def synthesize_id(
    feed_title: str, source_url: str, position: int, title: str, taken: Set[str]
) -> str:
    """Build ``<feed title>-<token>`` for an entry with neither id nor link.

    The token is derived from the entry's place in the document so the same
    text always yields the same ids; the counter only moves on collision.
    """
    counter = 0
    while True:
        seed = f"{source_url}\n{position}\n{title}\n{counter}"
        token = hashlib.sha1(seed.encode("utf-8")).hexdigest()[:13]
        candidate = f"{feed_title}-{token}"
        if candidate not in taken:
            return candidate
        counter += 1


def _build_item(
    item: Tag,
    fields: DialectFields,
    *,
    feed_title: str,
    source_url: str,
    position: int,
    taken: Set[str],
) -> FeedItem:
    title = element_text(select_one(item, "title", recursive=False)) or UNTITLED_ITEM
    link = _read_link(item, fields)
    item_id = element_text(select_one(item, fields.item_id, recursive=False)) or link
    if not item_id:
        item_id = synthesize_id(feed_title, source_url, position, title, taken)

    description = _first_value(
        item, fields.item_description, lambda tag: html_to_text(element_markup(tag))
    )

    return FeedItem(
        id=item_id,
        title=title,
        link=link,
        description=description,
        author=_first_text(item, fields.author),
        categories=_read_categories(item, fields),
        publish_date=parse_date(_first_text(item, fields.published)),
        image_url=extract_image_url(item),
    )


def _fallback_item(
    item: Tag, *, feed_title: str, source_url: str, position: int, taken: Set[str]
) -> FeedItem:
    title = element_text(select_one(item, "title", recursive=False)) or UNTITLED_ITEM
    return FeedItem(
        id=synthesize_id(feed_title, source_url, position, title, taken),
        title=title,
    )


def _check_well_formed(document_text: str) -> None:
    try:
        ElementTree.fromstring(document_text)
    except ElementTree.ParseError as exc:
        raise ParseError("invalid XML") from exc


def parse_feed(
    document_text: str,
    source_url: str,
    registry: Optional[FeedRegistry] = None,
    *,
    articles: int | None = None,
) -> Feed:
    """Parse *document_text* into a ``Feed`` for *source_url*.

    When *registry* is given the feed is stored under *source_url*, replacing
    any earlier entry.  Raises ``ParseError`` before touching the registry when
    the document is not well-formed XML or is neither RSS nor Atom.
    """
    document_text = (document_text or "").lstrip("\ufeff").strip()
    _check_well_formed(document_text)

    soup = BeautifulSoup(document_text, "xml")
    dialect, container = detect_dialect(soup)
    fields = DIALECTS[dialect]
    logger.debug("Detected %s feed for %s", dialect.value, source_url)

    title = element_text(select_one(container, "title", recursive=False))
    link = _read_link(container, fields) or source_url
    description = html_to_text(
        element_markup(select_one(container, fields.feed_description, recursive=False))
    )

    items = []
    taken: Set[str] = set()
    for position, entry in enumerate(select_all(soup, fields.entry)):
        context = dict(feed_title=title, source_url=source_url, position=position, taken=taken)
        try:
            feed_item = _build_item(entry, fields, **context)
        except Exception as exc:
            logger.error("Failed to extract entry %d from %s: %s", position, source_url, exc)
            feed_item = _fallback_item(entry, **context)
        taken.add(feed_item.id)
        items.append(feed_item)

    feed = Feed(
        url=source_url,
        title=title,
        description=description,
        link=link,
        items=items,
        last_updated=datetime.now(timezone.utc),
        articles=config.DEFAULT_ARTICLES if articles is None else articles,
    )
    logger.info("Parsed %d entries from %s", len(items), source_url)
    if registry is not None:
        registry.add(source_url, feed)
    return feed
