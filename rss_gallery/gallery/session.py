"""A mounted gallery: fetch, parse, paginate and preload for one feed."""

import logging
from collections.abc import Callable

from rss_gallery.config import Settings
from rss_gallery.rss.fetcher import FeedFetcher, FetchError, get_transport
from rss_gallery.rss.models import ParsedFeed
from rss_gallery.rss.parser import parse_feed

from .paginator import CardLayout, LayoutMonitor, Paginator
from .preloader import HttpImageProbe, ImagePreloader, ImageProbe
from .render import FEED_ERROR_MESSAGE, GalleryView, build_gallery_view

Listener = Callable[[GalleryView], None]


class GallerySession:
    """State of one gallery mount.

    The feed is fetched once per session; a fetch failure is terminal and
    replaces the gallery with a fixed error message. Width measurements
    may change the page size, which clamps the current page and restarts
    image preloading. Listeners receive a fresh ``GalleryView`` after every
    state change. ``close()`` tears everything down and silences pending
    callbacks.
    """

    def __init__(
        self,
        fetcher: FeedFetcher,
        feed_url: str,
        *,
        heading: str = "",
        probe: ImageProbe | None = None,
        preload: bool = True,
        layout: CardLayout | None = None,
        page_size: int = 6,
        debounce: float = 0.15,
        wave_delay: float = 1.0,
        batch_window: float = 0.05,
        date_format: str = "%d.%m.%Y",
        logger: logging.Logger | None = None,
    ):
        self.fetcher = fetcher
        self.feed_url = feed_url
        self.heading = heading
        self.preload = preload
        self.date_format = date_format
        self.logger = logger or logging.getLogger(__name__)

        self.loading = True
        self.error: str | None = None
        self.feed = ParsedFeed()
        self.paginator = Paginator((), page_size)
        self.preloader = ImagePreloader(
            probe or HttpImageProbe(),
            on_settled=self._on_settled,
            wave_delay=wave_delay,
            batch_window=batch_window,
            logger=self.logger,
        )
        self.layout = LayoutMonitor(
            self._on_page_size, layout=layout, debounce=debounce, logger=self.logger
        )
        self._listeners: list[Listener] = []
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        feed_url: str | None = None,
        fetcher: FeedFetcher | None = None,
        probe: ImageProbe | None = None,
        preload: bool = True,
        logger: logging.Logger | None = None,
    ) -> "GallerySession":
        """Build a session wired to the configured transport and layout."""
        return cls(
            fetcher or FeedFetcher(get_transport(settings), logger=logger),
            feed_url or settings.feed_url,
            heading=settings.title,
            probe=probe or HttpImageProbe(timeout=settings.image_probe_timeout_seconds),
            preload=preload,
            layout=CardLayout(
                card_width=settings.card_width,
                gap=settings.card_gap,
                wide_columns=settings.wide_columns,
                wide_page_size=settings.wide_page_size,
                narrow_page_size=settings.narrow_page_size,
                hysteresis=settings.resize_hysteresis_px,
            ),
            page_size=settings.default_page_size,
            debounce=settings.resize_debounce_ms / 1000,
            wave_delay=settings.preload_wave_delay_ms / 1000,
            batch_window=settings.preload_batch_window_ms / 1000,
            date_format=settings.date_format,
            logger=logger,
        )

    async def load(self) -> GalleryView:
        """Fetch and parse the feed, then start preloading its images."""
        self.loading = True
        self.error = None
        try:
            raw = await self.fetcher.fetch(self.feed_url)
        except FetchError:
            self.feed = ParsedFeed()
            self.error = FEED_ERROR_MESSAGE
        else:
            self.feed = parse_feed(raw, logger=self.logger)
        finally:
            self.loading = False

        if self._closed:
            return self.view()

        self.paginator.replace_items(self.feed.items)
        self._restart_preload()
        self._notify()
        return self.view()

    def measure(self, width: float, immediate: bool = False) -> None:
        """Report a container width measurement.

        Measurements are debounced unless ``immediate`` is set.
        """
        if self._closed:
            return
        self.layout.report(width)
        if immediate:
            self.layout.flush()

    def next_page(self) -> int:
        page = self.paginator.next()
        self._notify()
        return page

    def previous_page(self) -> int:
        page = self.paginator.previous()
        self._notify()
        return page

    def go_to(self, page: int) -> int:
        page = self.paginator.go_to(page)
        self._notify()
        return page

    def view(self) -> GalleryView:
        paginator = self.paginator
        return build_gallery_view(
            heading=self.heading,
            loading=self.loading,
            error=self.error,
            channel_image=self.feed.channel_image,
            displayed=paginator.displayed,
            first_index=(paginator.current_page - 1) * paginator.page_size,
            settled=self.preloader.settled if self.preload else None,
            page=paginator.current_page,
            total_pages=paginator.total_pages,
            page_size=paginator.page_size,
            date_format=self.date_format,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.preloader.cancel()
        self.layout.close()
        self._listeners.clear()
        self.logger.debug(f"Gallery session closed: {self.feed_url}")

    def _restart_preload(self) -> None:
        if not self.preload or self.error or self._closed:
            return
        self.preloader.start(self.feed.items, self.paginator.page_size)

    def _on_page_size(self, page_size: int) -> None:
        if self._closed or not self.paginator.set_page_size(page_size):
            return
        self.logger.info(
            f"Page size changed to {page_size}, now on page {self.paginator.current_page}",
            extra={"stage": "layout"},
        )
        if not self.loading:
            self._restart_preload()
        self._notify()

    def _on_settled(self, settled: frozenset[int]) -> None:
        self._notify()

    def _notify(self) -> None:
        if self._closed or not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)
