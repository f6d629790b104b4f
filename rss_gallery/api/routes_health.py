"""Liveness and readiness probes for the RSS Gallery API."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from rss_gallery.config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def health_check():
    """The process is up."""
    return {"ok": True}


@router.get("/readyz")
async def readiness_check(settings: Settings = Depends(get_settings)):
    """
    Ready once a default feed URL is configured.

    Returns:
        {"ok": bool, "feed_configured": bool}; status 503 when no feed is set
    """
    configured = bool(settings.feed_url.strip())
    body = {"ok": configured, "feed_configured": configured}
    if not configured:
        return JSONResponse(status_code=503, content=body)
    return body
