"""RSS 2.0 parsing with Media RSS and Dublin Core extensions."""

import logging
import re
import xml.etree.ElementTree as ET

from .models import ChannelImage, FeedItem, ParsedFeed

# XML namespaces for RSS extensions
NAMESPACES = {
    "media": "http://search.yahoo.com/mrss/",
    "dc": "http://purl.org/dc/elements/1.1/",
}

# "https:/host/path" - scheme followed by a single slash
_SINGLE_SLASH_SCHEME = re.compile(r"^(https?):/(?!/)", re.IGNORECASE)
_QUALIFIED_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_image_url(url: str) -> str:
    """Turn a feed-declared image URL into an absolute https URL.

    Repairs a single slash after the scheme, leaves qualified http(s) URLs
    alone, completes protocol-relative URLs and prefixes anything else with
    https://. Running it on its own output returns the same string.
    """
    url = url.strip()
    url = _SINGLE_SLASH_SCHEME.sub(r"\1://", url)
    if _QUALIFIED_SCHEME.match(url):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return f"https://{url}"


def _text(element: ET.Element | None) -> str | None:
    """Text content of an element and its descendants, None if missing or empty."""
    if element is None:
        return None
    return "".join(element.itertext()) or None


def _dimension(element: ET.Element | None) -> int | None:
    text = _text(element)
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def _parse_channel_image(root: ET.Element) -> ChannelImage | None:
    for channel in root.iter("channel"):
        image = channel.find("image")
        if image is None:
            continue
        return ChannelImage(
            title=_text(image.find("title")) or "",
            url=_text(image.find("url")) or "",
            link=_text(image.find("link")) or "",
            width=_dimension(image.find("width")),
            height=_dimension(image.find("height")),
        )
    return None


def _url_attribute(element: ET.Element) -> str | None:
    """The url attribute with whitespace stripped, None if blank."""
    return (element.get("url") or "").strip() or None


def _parse_item(item: ET.Element) -> FeedItem:
    media_content = item.find(".//media:content", NAMESPACES)
    enclosure = item.find("enclosure")

    image_url = None
    image_title = None
    image_credit = None
    if media_content is not None:
        image_url = _url_attribute(media_content)
        image_title = _text(media_content.find(".//media:title", NAMESPACES))
        image_credit = _text(media_content.find(".//media:credit", NAMESPACES))
    if not image_url and enclosure is not None:
        image_url = _url_attribute(enclosure)

    return FeedItem(
        title=_text(item.find("title")) or "",
        link=_text(item.find("link")) or "",
        ingress=_text(item.find("description")) or "",
        image=normalize_image_url(image_url) if image_url else None,
        image_title=image_title,
        image_credit=image_credit,
        pub_date=_text(item.find("pubDate")),
        creator=_text(item.find("dc:creator", NAMESPACES)),
        categories=tuple(
            _text(category) or "" for category in item.findall("category")
        ),
    )


def parse_feed(raw_xml: str, logger: logging.Logger | None = None) -> ParsedFeed:
    """
    Parse an RSS 2.0 document into a channel image and ordered items.

    Args:
        raw_xml: Feed body as returned by the fetcher
        logger: Optional logger for tracing; defaults to the module logger

    Returns:
        ParsedFeed with items in document order. Malformed XML yields an
        empty ParsedFeed rather than an exception.
    """
    log = logger or logging.getLogger(__name__)

    try:
        root = ET.fromstring(raw_xml)
    except ET.ParseError as e:
        # Invalid XML - treat as an empty feed
        log.warning(f"Could not parse RSS feed: {e}", extra={"stage": "parse"})
        return ParsedFeed()

    channel_image = _parse_channel_image(root)
    items = tuple(_parse_item(item) for item in root.iter("item"))

    log.info(
        f"Parsed RSS feed: {len(items)} items, "
        f"channel image {'present' if channel_image else 'absent'}",
        extra={"stage": "parse"},
    )
    return ParsedFeed(channel_image=channel_image, items=items)
