"""Gallery pagination, image preloading and render model."""

from .paginator import (
    CardLayout,
    LayoutMonitor,
    Paginator,
    page_size_for_width,
    slice_page,
    total_pages,
)
from .preloader import HttpImageProbe, ImagePreloader, ImageProbe
from .render import FEED_ERROR_MESSAGE, GalleryView, build_gallery_view
from .session import GallerySession

__all__ = [
    "FEED_ERROR_MESSAGE",
    "CardLayout",
    "GallerySession",
    "GalleryView",
    "HttpImageProbe",
    "ImagePreloader",
    "ImageProbe",
    "LayoutMonitor",
    "Paginator",
    "build_gallery_view",
    "page_size_for_width",
    "slice_page",
    "total_pages",
]
