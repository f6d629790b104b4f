"""Render model consumed by the gallery front end."""

from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Sequence

from pydantic import BaseModel

from rss_gallery.rss.models import ChannelImage, FeedItem

TITLE_MAX_LENGTH = 60
INGRESS_MAX_LENGTH = 120
DEFAULT_CHANNEL_IMAGE_SIZE = 114

FEED_ERROR_MESSAGE = "Failed to load RSS feed. Please try again later."


class HeaderImage(BaseModel):
    src: str
    alt: str
    link: str
    max_width: int
    max_height: int


class Card(BaseModel):
    index: int  # position in the full item list
    title: str
    link: str
    ingress: str
    image: str | None = None
    image_alt: str | None = None
    image_credit: str | None = None
    placeholder: bool = False
    categories: list[str] = []
    byline: str | None = None


class GalleryView(BaseModel):
    heading: str = ""
    loading: bool = False
    error: str | None = None
    header_image: HeaderImage | None = None
    cards: list[Card] = []
    page: int = 1
    total_pages: int = 0
    page_size: int = 0
    has_previous: bool = False
    has_next: bool = False
    show_pagination: bool = False


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def format_pub_date(pub_date: str, fmt: str = "%d.%m.%Y") -> str:
    """Format an RFC-822 or DD-MM-YYYY date, returning the input if neither parses."""
    value = pub_date.strip()
    parsed: datetime | None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.strptime(value, "%d-%m-%Y")
        except ValueError:
            return pub_date
    return parsed.strftime(fmt)


def byline(creator: str | None, pub_date: str | None, fmt: str = "%d.%m.%Y") -> str | None:
    parts = []
    if creator:
        parts.append(f"By {creator}")
    if pub_date:
        parts.append(format_pub_date(pub_date, fmt))
    return " • ".join(parts) or None


def header_image(image: ChannelImage | None) -> HeaderImage | None:
    if image is None:
        return None
    # zero dimensions fall back to the default box like missing ones
    return HeaderImage(
        src=image.url,
        alt=image.title,
        link=image.link,
        max_width=image.width or DEFAULT_CHANNEL_IMAGE_SIZE,
        max_height=image.height or DEFAULT_CHANNEL_IMAGE_SIZE,
    )


def build_card(
    item: FeedItem,
    index: int,
    settled: frozenset[int] | None = None,
    date_format: str = "%d.%m.%Y",
) -> Card:
    return Card(
        index=index,
        title=truncate_text(item.title, TITLE_MAX_LENGTH),
        link=item.link,
        ingress=truncate_text(item.ingress, INGRESS_MAX_LENGTH),
        image=item.image,
        image_alt=(item.image_title or item.title) if item.image else None,
        image_credit=item.image_credit,
        placeholder=(
            settled is not None and item.image is not None and index not in settled
        ),
        categories=list(item.categories),
        byline=byline(item.creator, item.pub_date, date_format),
    )


def build_gallery_view(
    *,
    heading: str = "",
    loading: bool = False,
    error: str | None = None,
    channel_image: ChannelImage | None = None,
    displayed: Sequence[FeedItem] = (),
    first_index: int = 0,
    settled: frozenset[int] | None = None,
    page: int = 1,
    total_pages: int = 0,
    page_size: int = 0,
    date_format: str = "%d.%m.%Y",
) -> GalleryView:
    """Assemble the snapshot a front end needs to draw one page of cards.

    Loading and error states replace the whole gallery: no header image,
    cards or pagination are included.
    """
    if loading or error:
        return GalleryView(heading=heading, loading=loading, error=error)

    cards = [
        build_card(item, first_index + offset, settled, date_format)
        for offset, item in enumerate(displayed)
    ]
    return GalleryView(
        heading=heading,
        header_image=header_image(channel_image),
        cards=cards,
        page=page,
        total_pages=total_pages,
        page_size=page_size,
        has_previous=page > 1,
        has_next=page < total_pages,
        show_pagination=total_pages > 1,
    )
