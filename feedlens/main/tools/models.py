"""Normalized feed entities shared by the parser, the registry and the servers."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FeedItem(BaseModel):
    """One entry of a feed.

    ``publish_date`` and ``image_url`` are ``None`` when the source has no
    usable value; every other field always holds a renderable string.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = "No title"
    link: str = ""
    description: str = ""
    author: str = ""
    categories: List[str] = Field(default_factory=list)
    publish_date: Optional[datetime] = None
    image_url: Optional[str] = None


class Feed(BaseModel):
    """A parsed feed.  Only ``articles`` is meant to change after parsing."""

    model_config = ConfigDict(validate_assignment=True)

    url: str
    title: str = ""
    description: str = ""
    link: str = ""
    items: List[FeedItem] = Field(default_factory=list)
    last_updated: datetime
    # Display window owned by the presentation side; parsing never reads it.
    articles: int = Field(default=5, ge=1)
