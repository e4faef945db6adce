"""FastMCP server exposing the feed engine as tools.

Available tools:
* ``add_feed(url: str) -> str`` – fetches and parses a feed and keeps it in memory.
* ``list_feeds() -> str`` – JSON list of the loaded feeds with their latest items.
* ``export_feeds() -> str`` – JSON summary with item counts per feed URL.
"""

import json

from fastmcp import FastMCP

from feedlens.main import config
from feedlens.main.tools.extractor import FeedExtractor
from feedlens.main.tools.feed_parser import ParseError
from feedlens.main.tools.fetcher import FetchError

mcp = FastMCP("FeedLens")
extractor = FeedExtractor()


@mcp.tool
async def add_feed(url: str) -> str:
    """Fetch the RSS/Atom feed at *url* and add it to the loaded feeds."""
    try:
        feed = await extractor.fetch_feed(url)
    except FetchError as exc:
        return f"Failed to fetch feed: {exc}"
    except ParseError as exc:
        return f"Not a valid RSS/Atom feed: {exc}"
    return f"Feed loaded: {feed.title or url} ({len(feed.items)} items)"


@mcp.tool
async def list_feeds() -> str:
    """Return loaded feeds as a JSON string, each trimmed to its article window."""
    feeds = extractor.get_all_feeds()
    if not feeds:
        return "No feeds loaded."
    payload = []
    for feed in feeds:
        data = feed.model_dump(mode="json")
        data["items"] = data["items"][: feed.articles]
        payload.append(data)
    return json.dumps(payload)


@mcp.tool
async def export_feeds() -> str:
    """Return the per-feed summary (item counts, not items) as JSON."""
    return extractor.export_json()


def main() -> None:
    """Entry point – start the FastMCP server on stdio transport."""
    config.configure_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
