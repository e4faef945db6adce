from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query

from feedlens.main import config
from feedlens.main.tools.extractor import FeedExtractor
from feedlens.main.tools.feed_parser import ParseError
from feedlens.main.tools.fetcher import FetchError
from feedlens.main.tools.models import Feed

logger = logging.getLogger(__name__)


def create_app(
    extractor: Optional[FeedExtractor] = None,
    default_feeds: Optional[List[str]] = None,
) -> FastAPI:
    """Build the API around one ``FeedExtractor``.

    ``default_feeds`` are loaded at startup (``config.DEFAULT_FEEDS`` when not
    given); a feed that fails to load is logged and skipped.
    """
    extractor = extractor if extractor is not None else FeedExtractor()
    startup_feeds = config.DEFAULT_FEEDS if default_feeds is None else default_feeds

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if startup_feeds:
            logger.info("Loading %d default feeds", len(startup_feeds))
            await extractor.fetch_feeds(startup_feeds)
        try:
            yield
        finally:
            await extractor.aclose()

    app = FastAPI(
        title="FeedLens API",
        description="Fetch RSS/Atom feeds and serve them in one normalized shape.",
        version="0.1.0",
        docs_url="/docs",        # Swagger UI
        redoc_url="/redoc",      # ReDoc UI
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.extractor = extractor

    def _require_feed(url: str) -> Feed:
        feed = extractor.get_feed(url)
        if feed is None:
            raise HTTPException(status_code=404, detail=f"Feed not registered: {url}")
        return feed

    @app.get("/", tags=["Root"], summary="API root")
    async def read_root():
        return {"message": "Welcome to the FeedLens FastAPI server!"}

    @app.post(
        "/feeds",
        tags=["Feed"],
        summary="Add a feed",
        description="Fetch and parse the feed at ``url`` and add it to the registry.",
        response_model=Feed,
    )
    async def add_feed(url: str) -> Feed:
        try:
            return await extractor.fetch_feed(url)
        except FetchError as exc:
            detail = f"Could not reach feed {url}"
            if exc.status_code is not None:
                detail += f" ({exc.status_code} {exc.reason})"
            raise HTTPException(status_code=502, detail=detail)
        except ParseError as exc:
            raise HTTPException(status_code=422, detail=f"Not a valid feed: {exc}")

    @app.get(
        "/feeds",
        tags=["Feed"],
        summary="List feeds",
        description="Return every registered feed in the order it was added.",
        response_model=List[Feed],
    )
    async def list_feeds() -> List[Feed]:
        return extractor.get_all_feeds()

    @app.get("/feed", tags=["Feed"], summary="Get one feed", response_model=Feed)
    async def get_feed(url: str) -> Feed:
        return _require_feed(url)

    @app.delete("/feed", tags=["Feed"], summary="Remove a feed")
    async def remove_feed(url: str) -> dict:
        if not extractor.remove_feed(url):
            raise HTTPException(status_code=404, detail=f"Feed not registered: {url}")
        return {"message": f"Feed removed: {url}"}

    @app.patch(
        "/feed/articles",
        tags=["Feed"],
        summary="Set the article window",
        description="Change how many articles the dashboard shows for a feed.",
        response_model=Feed,
    )
    async def set_articles(url: str, articles: int = Query(..., ge=1)) -> Feed:
        _require_feed(url)
        return extractor.set_articles(url, articles)

    @app.get(
        "/export",
        tags=["Feed"],
        summary="Export feed summary",
        description="Per feed URL: scalar fields plus the number of items.",
    )
    async def export_feeds() -> Dict[str, Dict[str, Any]]:
        return extractor.export()

    return app


app = create_app()


def main():
    config.configure_logging()
    # bind to localhost interface by default
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    main()
