"""Tests for API endpoints."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketDisconnect

from rss_gallery.api import gallery_router, health_router
from rss_gallery.api.dependencies import get_feed_fetcher, get_image_probe
from rss_gallery.config import Settings, get_settings
from rss_gallery.gallery.render import FEED_ERROR_MESSAGE
from rss_gallery.rss.fetcher import FetchError
from tests.factories import InstantProbe, feed_xml


def make_fetcher(text: str | None = None, error: Exception | None = None):
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=text, side_effect=error)
    return fetcher


@pytest.fixture
def test_settings():
    return Settings(
        feed_url="news.example.com/rss",
        title="News",
        default_page_size=4,
        resize_debounce_ms=0,
        preload_wave_delay_ms=0,
        preload_batch_window_ms=0,
    )


@pytest_asyncio.fixture
async def test_app(test_settings):
    """Create a test FastAPI app with all routers."""
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(gallery_router)
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_image_probe] = lambda: InstantProbe()
    return app


def use_fetcher(app: FastAPI, fetcher) -> None:
    app.dependency_overrides[get_feed_fetcher] = lambda: fetcher


# Health check tests


@pytest.mark.asyncio
async def test_healthz_returns_200(test_app):
    """Test /healthz endpoint returns 200 with ok status."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_readyz_with_feed_configured(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/readyz")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "feed_configured": True}


@pytest.mark.asyncio
async def test_readyz_without_feed_returns_503(test_app, test_settings):
    test_settings.feed_url = ""

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/readyz")

    assert response.status_code == 503
    assert response.json()["feed_configured"] is False


# /api/feed tests


@pytest.mark.asyncio
async def test_feed_returns_parsed_items(test_app, sample_xml):
    fetcher = make_fetcher(sample_xml)
    use_fetcher(test_app, fetcher)

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/feed")

    assert response.status_code == 200
    data = response.json()
    assert data["channel_image"]["url"] == "https://news.example.com/logo.png"
    assert [item["title"] for item in data["items"]] == [
        "First story",
        "Second story",
        "Third story",
    ]
    assert data["items"][1]["image"] == "https://cdn.example.com/x.png"
    fetcher.fetch.assert_called_once_with("news.example.com/rss")


@pytest.mark.asyncio
async def test_feed_url_query_overrides_settings(test_app, sample_xml):
    fetcher = make_fetcher(sample_xml)
    use_fetcher(test_app, fetcher)

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/feed", params={"feed_url": "other.example.com/feed"})

    assert response.status_code == 200
    fetcher.fetch.assert_called_once_with("other.example.com/feed")


@pytest.mark.asyncio
async def test_feed_fetch_error_returns_502(test_app):
    use_fetcher(test_app, make_fetcher(error=FetchError("HTTP error! status: 404", 404)))

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/feed")

    assert response.status_code == 502
    assert response.json()["detail"] == FEED_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_feed_without_url_returns_400(test_app, test_settings):
    test_settings.feed_url = ""
    use_fetcher(test_app, make_fetcher("<rss/>"))

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/feed")

    assert response.status_code == 400


# /api/gallery tests


@pytest.mark.asyncio
async def test_gallery_last_page(test_app):
    use_fetcher(test_app, make_fetcher(feed_xml(10)))

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/gallery", params={"page": 3})

    assert response.status_code == 200
    data = response.json()
    assert data["page"] == 3
    assert data["total_pages"] == 3
    assert [card["title"] for card in data["cards"]] == ["Story 9", "Story 10"]
    assert data["has_next"] is False
    assert not any(card["placeholder"] for card in data["cards"])


@pytest.mark.asyncio
async def test_gallery_width_selects_page_size(test_app):
    use_fetcher(test_app, make_fetcher(feed_xml(10)))

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/gallery", params={"width": 1400})

    data = response.json()
    assert data["page_size"] == 8
    assert len(data["cards"]) == 8
    assert data["total_pages"] == 2


@pytest.mark.asyncio
async def test_gallery_fetch_error(test_app):
    use_fetcher(test_app, make_fetcher(error=FetchError("HTTP error! status: 404", 404)))

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/gallery")

    assert response.status_code == 502
    data = response.json()
    assert data["error"] == FEED_ERROR_MESSAGE
    assert data["cards"] == []


@pytest.mark.asyncio
async def test_gallery_rejects_invalid_page(test_app):
    use_fetcher(test_app, make_fetcher(feed_xml(3)))

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/gallery", params={"page": 0})

    assert response.status_code == 422


# /ws/gallery tests


def receive_until(ws, predicate, limit: int = 50):
    for _ in range(limit):
        view = ws.receive_json()
        if predicate(view):
            return view
    raise AssertionError("expected gallery view never arrived")


def test_ws_gallery_streams_views(test_app):
    use_fetcher(test_app, make_fetcher(feed_xml(10)))

    with TestClient(test_app) as client:
        with client.websocket_connect("/ws/gallery") as ws:
            first = ws.receive_json()
            assert first["loading"] is False
            assert first["page"] == 1
            assert len(first["cards"]) == 4

            receive_until(ws, lambda v: not any(c["placeholder"] for c in v["cards"]))

            ws.send_json({"type": "next"})
            second = receive_until(ws, lambda v: v["page"] == 2)
            assert [card["index"] for card in second["cards"]] == [4, 5, 6, 7]

            ws.send_json({"type": "measure", "width": 1400})
            resized = receive_until(ws, lambda v: v["page_size"] == 8)
            assert resized["page"] == 2
            assert [card["index"] for card in resized["cards"]] == [8, 9]


def test_ws_gallery_reports_fetch_error(test_app):
    use_fetcher(test_app, make_fetcher(error=FetchError("HTTP error! status: 404", 404)))

    with TestClient(test_app) as client:
        with client.websocket_connect("/ws/gallery") as ws:
            view = ws.receive_json()

    assert view["error"] == FEED_ERROR_MESSAGE
    assert view["cards"] == []


def test_ws_gallery_without_feed_url_closes(test_app, test_settings):
    test_settings.feed_url = ""

    with TestClient(test_app) as client:
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws/gallery") as ws:
                ws.receive_json()


@pytest.mark.asyncio
async def test_ws_gallery_collects_send_failure(test_settings, caplog):
    """A failing send is logged when the socket closes instead of being lost."""
    from rss_gallery.api.routes_gallery import gallery_socket

    async def receive_json():
        await asyncio.sleep(0.05)
        raise WebSocketDisconnect(1000)

    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock(side_effect=RuntimeError("socket gone"))
    websocket.receive_json = receive_json

    with caplog.at_level(logging.WARNING, logger="rss_gallery.api.routes_gallery"):
        await gallery_socket(
            websocket,
            feed_url=None,
            settings=test_settings,
            fetcher=make_fetcher(feed_xml(2)),
            probe=InstantProbe(),
        )

    websocket.send_json.assert_called_once()
    assert "Sending gallery views failed" in caplog.text
