"""API routers for RSS Gallery."""

from rss_gallery.api.routes_gallery import router as gallery_router
from rss_gallery.api.routes_health import router as health_router

__all__ = ["gallery_router", "health_router"]
