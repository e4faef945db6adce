"""Field-level helpers used by the feed parser.

* ``html_to_text`` – turn an HTML description into a one-line plain-text summary.
* ``parse_date`` – best-effort date parsing that never raises.
* ``select_all`` / ``select_one`` / ``element_text`` – namespace-tolerant lookups
  on a BeautifulSoup XML tree.
* ``element_markup`` – the HTML carried by a description element.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from bs4 import BeautifulSoup, Tag
# feedparser exposes its date handlers only through this private name;
# pyproject pins the major version.
from feedparser.datetimes import _parse_date

logger = logging.getLogger(__name__)

# Markup that never carries readable text.
_SKIPPED_TAGS = ["script", "style"]


def _collapse(text: str) -> str:
    return " ".join(text.split())


def html_to_text(html_content: str | None) -> str:
    """Return the plain text of an HTML fragment.

    The text of every ``<p>`` block is joined with single spaces.  Fragments
    without paragraphs (plain text, a lone ``<div>``) fall back to their whole
    text content.
    """
    if not html_content or not html_content.strip():
        return ""
    soup = BeautifulSoup(html_content, "html.parser")
    for tag in soup(_SKIPPED_TAGS):
        tag.decompose()
    blocks = [_collapse(p.get_text(" ")) for p in soup.find_all("p")]
    blocks = [b for b in blocks if b]
    if blocks:
        return " ".join(blocks)
    return _collapse(soup.get_text(" "))


def parse_date(value: str | None) -> Optional[datetime]:
    """Parse a feed date into an aware UTC ``datetime``, or ``None``.

    feedparser's date handlers cover RFC 822, W3CDTF/ISO 8601 and the regional
    variants seen in the wild; they return a UTC ``struct_time``.
    """
    if not value or not value.strip():
        return None
    parsed = _parse_date(value.strip())
    if parsed is None:
        logger.debug("Could not parse date: %s", value)
        return None
    try:
        return datetime(*parsed[:6], tzinfo=timezone.utc)
    except (ValueError, OverflowError, TypeError):
        logger.debug("Date out of range: %s", value)
        return None


def _split_selector(selector: str) -> tuple[str, str]:
    prefix, _, local = selector.rpartition(":")
    return prefix, local


def select_all(
    parent: Tag, selector: str, *, recursive: bool = True, exact: bool = False
) -> List[Tag]:
    """Find elements matching *selector* below *parent*, in document order.

    Matching happens on the local name.  ``"dc:creator"`` then keeps only
    elements carrying the ``dc`` prefix in the document.  A plain ``"link"``
    prefers unprefixed elements and falls back to prefixed ones (``atom:link``)
    when nothing else matches, unless *exact* is set.
    """
    prefix, local = _split_selector(selector)
    matches = parent.find_all(local, recursive=recursive)
    if prefix:
        return [tag for tag in matches if tag.prefix == prefix]
    plain = [tag for tag in matches if not tag.prefix]
    return plain if plain or exact else matches


def select_one(
    parent: Tag, selector: str, *, recursive: bool = True, exact: bool = False
) -> Optional[Tag]:
    found = select_all(parent, selector, recursive=recursive, exact=exact)
    return found[0] if found else None


def select_path(parent: Tag, path: str, *, exact: bool = False) -> Optional[Tag]:
    """Follow a ``/``-separated path of direct children, e.g. ``"author/name"``."""
    node: Optional[Tag] = parent
    for step in path.split("/"):
        if node is None:
            return None
        node = select_one(node, step, recursive=False, exact=exact)
    return node


def element_text(tag: Optional[Tag]) -> str:
    """Stripped text content of *tag*, ``""`` when the tag is missing."""
    if tag is None:
        return ""
    return tag.get_text().strip()


def element_markup(tag: Optional[Tag]) -> str:
    """HTML held by *tag*: inline XHTML children as markup, otherwise its text.

    Escaped HTML (RSS ``description``, Atom ``type="html"``) is already markup
    once unescaped; Atom ``type="xhtml"`` content arrives as real elements.
    """
    if tag is None:
        return ""
    if tag.get("type") == "xhtml" or tag.find(True) is not None:
        return "".join(str(child) for child in tag.contents).strip()
    return tag.get_text().strip()
