"""Periodic full resync of the reputation cache."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from .cache import ReputationCache
from .constants import REFRESH_INTERVAL
from .errors import RemoteError
from .remote import ReputationRemote

logger = logging.getLogger(__name__)


class Refresher:
    """Fetches the full domain list on a fixed interval and reconciles the cache."""

    def __init__(
        self,
        cache: ReputationCache,
        remote: ReputationRemote,
        interval_seconds: float = REFRESH_INTERVAL,
    ):
        self.cache = cache
        self.remote = remote
        self.interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        self.runs = 0
        self.failures = 0
        self.last_success: Optional[datetime] = None
        self.last_error: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> bool:
        """Resync once. Returns False (after logging) if the fetch failed."""
        self.runs += 1
        try:
            domains = await self.remote.fetch_full_list()
        except (RemoteError, httpx.HTTPError) as e:
            self.failures += 1
            self.last_error = str(e) or type(e).__name__
            logger.error(f"Cache refresh failed: {self.last_error}")
            return False

        result = self.cache.reconcile(domains)
        self.last_success = datetime.now(timezone.utc)
        self.last_error = None
        logger.info(
            "Cache refreshed: %s domains listed, %s added, %s flagged, %s cleared (%s cached)",
            len(domains),
            result.added,
            result.flagged,
            result.cleared,
            len(self.cache),
        )
        return True

    async def _run_loop(self) -> None:
        logger.info("Cache refresher started")

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.error("Cache refresher error: %s", exc)

        logger.info("Cache refresher stopped")

    async def start(self) -> None:
        """Start the refresh schedule (first run after one interval)."""
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Stop the refresh schedule."""
        task = self._task
        self._task = None
        self._stop_event.set()
        if task:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
