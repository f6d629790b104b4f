"""Pydantic models for parsed RSS feeds."""

from pydantic import BaseModel, ConfigDict


class ChannelImage(BaseModel):
    """Feed-level logo declared by the channel's <image> element."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    url: str = ""
    link: str = ""
    width: int | None = None
    height: int | None = None


class FeedItem(BaseModel):
    """A single <item> from an RSS feed."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    link: str = ""
    ingress: str = ""  # raw description, may contain HTML
    image: str | None = None  # always absolute when present
    image_title: str | None = None
    image_credit: str | None = None
    pub_date: str | None = None
    creator: str | None = None
    categories: tuple[str, ...] = ()


class ParsedFeed(BaseModel):
    """Channel image plus items in document order."""

    model_config = ConfigDict(frozen=True)

    channel_image: ChannelImage | None = None
    items: tuple[FeedItem, ...] = ()
