"""RSS feed module for RSS Gallery."""

from .fetcher import (
    AuthenticatedTransport,
    DirectTransport,
    FeedFetcher,
    FeedTransport,
    FetchError,
    get_transport,
    normalize_feed_url,
)
from .models import ChannelImage, FeedItem, ParsedFeed
from .parser import normalize_image_url, parse_feed

__all__ = [
    "AuthenticatedTransport",
    "ChannelImage",
    "DirectTransport",
    "FeedFetcher",
    "FeedItem",
    "FeedTransport",
    "FetchError",
    "ParsedFeed",
    "get_transport",
    "normalize_feed_url",
    "normalize_image_url",
    "parse_feed",
]
