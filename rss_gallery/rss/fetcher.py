"""Feed fetching over interchangeable HTTP transports."""

import logging
from abc import ABC, abstractmethod

import httpx

from rss_gallery.config import Settings

# Headers the host portal's authenticated client sends for feed requests
XML_REQUEST_HEADERS = {
    "Accept": "application/xml, text/xml, */*",
    "Content-Type": "application/xml",
}


class FetchError(Exception):
    """Raised when a feed cannot be retrieved."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def normalize_feed_url(feed_url: str) -> str:
    """Prefix scheme-less feed URLs with https://."""
    return feed_url if feed_url.startswith("http") else f"https://{feed_url}"


def _response_text(response: httpx.Response) -> str:
    if not response.is_success:
        raise FetchError(
            f"HTTP error! status: {response.status_code}",
            status_code=response.status_code,
        )
    return response.text


class FeedTransport(ABC):
    """Abstract transport that retrieves a feed body as text."""

    @abstractmethod
    async def get_text(self, url: str) -> str:
        """
        Issue a single GET for the feed.

        Args:
            url: Absolute feed URL

        Returns:
            Response body decoded as text

        Raises:
            FetchError: On a non-2xx status or any network failure
        """
        pass


class DirectTransport(FeedTransport):
    """Plain unauthenticated fetch."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    async def get_text(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True
            ) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Network error while fetching {url}: {e}") from e

        return _response_text(response)


class AuthenticatedTransport(FeedTransport):
    """Fetch routed through a host-supplied authenticated HTTP client.

    The host either hands over a ready ``httpx.AsyncClient`` carrying its own
    credentials, or a bearer token that is attached to a short-lived client.
    The client is owned by the host and is never closed here.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        token: str = "",
        timeout: float | None = None,
    ):
        self._client = client
        self.token = token
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = dict(XML_REQUEST_HEADERS)
        if self._client is None and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def get_text(self, url: str) -> str:
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=self._headers())
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url, headers=self._headers())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Network error while fetching {url}: {e}") from e

        return _response_text(response)


def get_transport(settings: Settings) -> FeedTransport:
    """
    Factory function to get the configured feed transport.

    Args:
        settings: Application settings

    Returns:
        Configured transport instance
    """
    if settings.feed_transport == "direct":
        return DirectTransport(timeout=settings.feed_timeout_seconds)
    elif settings.feed_transport == "authenticated":
        return AuthenticatedTransport(
            token=settings.feed_auth_token, timeout=settings.feed_timeout_seconds
        )
    else:
        raise ValueError(f"Unknown feed transport: {settings.feed_transport}")


class FeedFetcher:
    """Fetches raw feed text with exactly one attempt per call."""

    def __init__(self, transport: FeedTransport, logger: logging.Logger | None = None):
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    async def fetch(self, feed_url: str) -> str:
        """
        Fetch a feed, adding https:// when the URL has no scheme.

        Args:
            feed_url: Configured feed URL, possibly scheme-less

        Returns:
            Raw response body

        Raises:
            FetchError: If the transport fails; no retry is attempted
        """
        url = normalize_feed_url(feed_url)
        self.logger.info(f"Fetching RSS feed: {url}", extra={"stage": "fetch"})

        try:
            text = await self.transport.get_text(url)
        except FetchError as e:
            self.logger.error(
                f"Error fetching RSS feed {url}: {e.message}", extra={"stage": "fetch"}
            )
            raise

        self.logger.info(
            f"Fetched RSS feed {url} ({len(text)} chars)", extra={"stage": "fetch"}
        )
        return text
