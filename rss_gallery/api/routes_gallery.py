"""Feed and gallery endpoints for the RSS Gallery API."""

import asyncio
import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from rss_gallery.api.dependencies import get_feed_fetcher, get_image_probe
from rss_gallery.config import Settings, get_settings
from rss_gallery.gallery.preloader import ImageProbe
from rss_gallery.gallery.render import FEED_ERROR_MESSAGE, GalleryView
from rss_gallery.gallery.session import GallerySession
from rss_gallery.rss.fetcher import FeedFetcher, FetchError
from rss_gallery.rss.parser import parse_feed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gallery"])
limiter = Limiter(key_func=get_remote_address)


def _resolve_feed_url(feed_url: str | None, settings: Settings) -> str:
    url = (feed_url or settings.feed_url).strip()
    if not url:
        raise HTTPException(status_code=400, detail="No feed URL configured")
    return url


@router.get("/api/feed")
@limiter.limit("60/minute")
async def get_feed(
    request: Request,
    feed_url: str | None = Query(default=None, description="Override the configured feed"),
    settings: Settings = Depends(get_settings),
    fetcher: FeedFetcher = Depends(get_feed_fetcher),
):
    """
    Fetch and parse the feed.

    Returns:
        JSON with channel_image (or null) and items in feed order

    Raises:
        HTTPException: 502 with the user-facing message if the feed cannot be fetched
    """
    url = _resolve_feed_url(feed_url, settings)

    try:
        raw = await fetcher.fetch(url)
    except FetchError:
        raise HTTPException(status_code=502, detail=FEED_ERROR_MESSAGE)

    return parse_feed(raw).model_dump(mode="json")


@router.get("/api/gallery")
@limiter.limit("60/minute")
async def get_gallery(
    request: Request,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    width: float | None = Query(
        default=None, gt=0, description="Container width used to pick the page size"
    ),
    feed_url: str | None = Query(default=None, description="Override the configured feed"),
    settings: Settings = Depends(get_settings),
    fetcher: FeedFetcher = Depends(get_feed_fetcher),
):
    """
    Render one page of the gallery.

    Images are not probed here; clients load them directly, so cards carry
    no placeholders. Pages past the end are clamped to the last page.

    Returns:
        GalleryView JSON; status 502 with the error view if the fetch failed
    """
    url = _resolve_feed_url(feed_url, settings)

    session = GallerySession.from_settings(
        settings, feed_url=url, fetcher=fetcher, preload=False
    )
    try:
        await session.load()
        if width is not None:
            session.measure(width, immediate=True)
        session.go_to(page)
        view = session.view()
    finally:
        session.close()

    if view.error:
        return JSONResponse(status_code=502, content=view.model_dump(mode="json"))
    return view.model_dump(mode="json")


async def _send_views(websocket: WebSocket, queue: "asyncio.Queue[GalleryView]") -> None:
    while True:
        view = await queue.get()
        await websocket.send_json(view.model_dump(mode="json"))


def _handle_message(session: GallerySession, message: dict) -> None:
    kind = message.get("type")
    if kind == "measure":
        width = message.get("width")
        if isinstance(width, (int, float)) and width > 0:
            session.measure(float(width))
        else:
            logger.warning(f"Ignoring invalid width measurement: {width!r}")
    elif kind == "next":
        session.next_page()
    elif kind == "previous":
        session.previous_page()
    elif kind == "go_to":
        page = message.get("page")
        if isinstance(page, int):
            session.go_to(page)
    else:
        logger.warning(f"Ignoring unknown gallery message type: {kind!r}")


@router.websocket("/ws/gallery")
async def gallery_socket(
    websocket: WebSocket,
    feed_url: str | None = None,
    settings: Settings = Depends(get_settings),
    fetcher: FeedFetcher = Depends(get_feed_fetcher),
    probe: ImageProbe = Depends(get_image_probe),
):
    """
    Live gallery mount.

    The server pushes a GalleryView after loading and after every change:
    page navigation, page-size changes and batches of settled images.
    Clients send {"type": "measure", "width": W}, {"type": "next"},
    {"type": "previous"} or {"type": "go_to", "page": N}.
    """
    url = (feed_url or settings.feed_url).strip()
    await websocket.accept()
    if not url:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    session = GallerySession.from_settings(
        settings, feed_url=url, fetcher=fetcher, probe=probe
    )
    queue: asyncio.Queue[GalleryView] = asyncio.Queue()
    session.subscribe(queue.put_nowait)
    sender = asyncio.create_task(_send_views(websocket, queue))

    try:
        await session.load()
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict):
                _handle_message(session, message)
    except WebSocketDisconnect:
        logger.info(f"Gallery client disconnected: {url}")
    finally:
        session.close()
        sender.cancel()
        (outcome,) = await asyncio.gather(sender, return_exceptions=True)
        if isinstance(outcome, Exception):
            logger.warning(f"Sending gallery views failed: {url}", exc_info=outcome)
