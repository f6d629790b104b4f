"""FastAPI dependencies for API routers."""

from fastapi import Depends

from rss_gallery.config import Settings, get_settings
from rss_gallery.gallery.preloader import HttpImageProbe, ImageProbe
from rss_gallery.rss.fetcher import FeedFetcher, get_transport


def get_feed_fetcher(settings: Settings = Depends(get_settings)) -> FeedFetcher:
    """Dependency providing a fetcher on the configured transport."""
    return FeedFetcher(get_transport(settings))


def get_image_probe(settings: Settings = Depends(get_settings)) -> ImageProbe:
    """Dependency providing the image probe used by the preloader."""
    return HttpImageProbe(timeout=settings.image_probe_timeout_seconds)
