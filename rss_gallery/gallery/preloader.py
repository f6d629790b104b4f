"""Progressive image probing with batched settlement updates."""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol, Sequence

import httpx

from rss_gallery.rss.models import FeedItem


class ImageProbe(Protocol):
    """Loads an image URL and reports whether it succeeded."""

    async def __call__(self, url: str) -> bool: ...


class HttpImageProbe:
    """Probe that downloads the image with httpx.

    Network errors and non-2xx responses count as a failed load.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None):
        self._client = client
        self.timeout = timeout

    async def __call__(self, url: str) -> bool:
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL):
            return False
        return response.is_success


class ImagePreloader:
    """Probes item images in two waves and reports settled item indices.

    Wave one covers indices ``[0, page_size)`` and starts at once; wave two
    covers the rest after ``wave_delay`` seconds. A probe that loads or fails
    settles its index. Settlements arriving within ``batch_window`` seconds
    are merged into a single ``on_settled`` call carrying the whole settled
    set, which only ever grows until the next ``start()``.

    Indices refer to positions in the full item sequence passed to
    ``start()``. Each ``start()`` or ``cancel()`` bumps a generation counter so
    callbacks from an earlier run are ignored.
    """

    def __init__(
        self,
        probe: ImageProbe,
        on_settled: Callable[[frozenset[int]], None] | None = None,
        wave_delay: float = 1.0,
        batch_window: float = 0.05,
        logger: logging.Logger | None = None,
    ):
        self.probe = probe
        self.on_settled = on_settled
        self.wave_delay = wave_delay
        self.batch_window = batch_window
        self.logger = logger or logging.getLogger(__name__)
        self.settled: frozenset[int] = frozenset()
        self._generation = 0
        self._tasks: list[asyncio.Task] = []
        self._pending: set[int] = set()
        self._flush_handle: asyncio.TimerHandle | None = None

    def start(self, items: Sequence[FeedItem], page_size: int) -> None:
        """Restart preloading for a new item list or page size."""
        self.cancel()
        self.settled = frozenset()
        generation = self._generation

        targets = [(i, item.image) for i, item in enumerate(items) if item.image]
        visible = [(i, url) for i, url in targets if i < page_size]
        remainder = [(i, url) for i, url in targets if i >= page_size]

        self.logger.info(
            f"Preloading {len(visible)} visible and {len(remainder)} deferred images",
            extra={"stage": "preload"},
        )
        self._tasks = [
            asyncio.create_task(self._run_wave(generation, visible, 0)),
            asyncio.create_task(self._run_wave(generation, remainder, self.wave_delay)),
        ]

    def cancel(self) -> None:
        """Make every in-flight probe and pending batch inert."""
        self._generation += 1
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        self._pending.clear()

    async def join(self) -> frozenset[int]:
        """Wait for the current run to finish and deliver its last batch."""
        generation = self._generation
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if generation == self._generation:
            if self._flush_handle is not None:
                self._flush_handle.cancel()
            self._flush(generation)
        return self.settled

    async def _run_wave(
        self, generation: int, targets: list[tuple[int, str]], delay: float
    ) -> None:
        if not targets:
            return
        if delay > 0:
            await asyncio.sleep(delay)
        await asyncio.gather(*(self._probe_one(generation, i, url) for i, url in targets))

    async def _probe_one(self, generation: int, index: int, url: str) -> None:
        try:
            loaded = await self.probe(url)
        except Exception:
            self.logger.warning(f"Image probe crashed for {url}", exc_info=True)
            loaded = False

        if generation != self._generation:
            return
        if not loaded:
            self.logger.debug(f"Image failed to load: {url}", extra={"stage": "preload"})
        self._settle(generation, index)

    def _settle(self, generation: int, index: int) -> None:
        self._pending.add(index)
        if self.batch_window <= 0:
            self._flush(generation)
        elif self._flush_handle is None:
            loop = asyncio.get_running_loop()
            self._flush_handle = loop.call_later(self.batch_window, self._flush, generation)

    def _flush(self, generation: int) -> None:
        self._flush_handle = None
        if generation != self._generation:
            return
        batch = self._pending - self.settled
        self._pending.clear()
        if not batch:
            return
        self.settled = self.settled | batch
        if self.on_settled is not None:
            self.on_settled(self.settled)
