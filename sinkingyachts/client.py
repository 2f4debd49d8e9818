"""Anti-phishing client: cache-first domain checks against Sinking Yachts."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Optional, Union

from .cache import ReputationCache
from .constants import (
    API_URL,
    DEFAULT_CACHE_PERIOD_HOURS,
    FEED_URL,
    IDENTITY_PREFIX,
    MAX_RECENT_SECONDS,
    RECONNECT_DELAY,
    REFRESH_INTERVAL,
    REQUEST_TIMEOUT,
    is_official_domain,
)
from .errors import InvalidArgument
from .feed import LiveFeed
from .models import Change, StorageMode
from .refresher import Refresher
from .remote import ReputationRemote
from .utils.domains import ContentScanner

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

DomainHook = Callable[[str], None]


def build_identity(identity: Optional[str] = None) -> str:
    """Build the X-Identity header value (defaults to the running program's name)."""
    name = (identity or "").strip()
    if not name:
        name = os.path.splitext(os.path.basename(sys.argv[0] or ""))[0] or "python"
    return f"{IDENTITY_PREFIX} | {name}"


class YachtsClient:
    """
    Main entry point for phishing checks.

    Storage modes:
    - ON_DEMAND: each unknown domain costs one API request, then stays cached
      for `cache_period_hours`
    - POLLING: the full list is cached on start() and resynced every 15 minutes
    - POLLING_FEED: POLLING plus the live WebSocket feed, so new domains are
      known as soon as they are added

    Usage:
        async with YachtsClient(StorageMode.POLLING_FEED, identity="My Bot") as yachts:
            if await yachts.is_phishing(message_text):
                ...
    """

    def __init__(
        self,
        mode: StorageMode = StorageMode.ON_DEMAND,
        cache_period_hours: float = DEFAULT_CACHE_PERIOD_HOURS,
        identity: Optional[str] = None,
        *,
        api_url: str = API_URL,
        feed_url: str = FEED_URL,
        refresh_interval: float = REFRESH_INTERVAL,
        reconnect_delay: float = RECONNECT_DELAY,
        request_timeout: float = REQUEST_TIMEOUT,
        remote: Optional[ReputationRemote] = None,
        on_domain_added: Optional[DomainHook] = None,
        on_domain_deleted: Optional[DomainHook] = None,
    ):
        """
        Create a client.

        Args:
            mode: Domain storage mode, fixed for the client's lifetime
            cache_period_hours: How long on-demand API answers stay cached
            identity: Short name of the calling application
            api_url: Reputation API base URL
            feed_url: Live feed WebSocket URL
            refresh_interval: Seconds between full resyncs (polling modes)
            reconnect_delay: Seconds to wait before reconnecting the feed
            request_timeout: Per-request HTTP timeout in seconds
            remote: Pre-built API client (mainly for tests)
            on_domain_added: Called for every domain the feed adds
            on_domain_deleted: Called for every domain the feed deletes
        """
        self.mode = StorageMode.parse(mode)
        self.identity = build_identity(identity)
        self.cache_period = timedelta(hours=cache_period_hours)
        self.on_domain_added = on_domain_added
        self.on_domain_deleted = on_domain_deleted

        self.cache = ReputationCache()
        self.scanner = ContentScanner()
        self.remote = remote or ReputationRemote(
            self.identity,
            api_url=api_url,
            timeout=request_timeout,
        )

        self.refresher: Optional[Refresher] = None
        self.feed: Optional[LiveFeed] = None
        if self.mode.polls:
            self.refresher = Refresher(self.cache, self.remote, interval_seconds=refresh_interval)
        if self.mode.uses_feed:
            self.feed = LiveFeed(
                self.identity,
                url=feed_url,
                reconnect_delay=reconnect_delay,
                on_add=self._handle_domain_added,
                on_delete=self._handle_domain_deleted,
            )

        self._inflight: dict[str, asyncio.Future] = {}
        self._started = False

    @classmethod
    def from_config(cls, config: "Config", **kwargs) -> "YachtsClient":
        """Build a client from a loaded Config."""
        return cls(
            config.mode,
            config.cache_period_hours,
            config.identity or None,
            api_url=config.api_url,
            feed_url=config.feed_url,
            refresh_interval=config.refresh_interval_seconds,
            reconnect_delay=config.reconnect_delay_seconds,
            request_timeout=config.request_timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "YachtsClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def start(self) -> None:
        """Load the cache and start background sync for the configured mode."""
        if self._started:
            return
        self._started = True
        logger.info("Starting sinkingyachts client (mode=%s)", self.mode.value)

        if self.refresher:
            await self.refresher.run_once()
            await self.refresher.start()
        if self.feed:
            await self.feed.start()

    async def stop(self) -> None:
        """Stop background sync and release network resources."""
        if self.feed:
            await self.feed.stop()
        if self.refresher:
            await self.refresher.stop()
        self.cache.close()
        await self.remote.close()
        self._started = False
        logger.info("sinkingyachts client stopped")

    def _handle_domain_added(self, domain: str) -> None:
        self.cache.set(domain, True)
        self._notify(self.on_domain_added, domain)

    def _handle_domain_deleted(self, domain: str) -> None:
        self.cache.set(domain, False)
        self._notify(self.on_domain_deleted, domain)

    @staticmethod
    def _notify(hook: Optional[DomainHook], domain: str) -> None:
        if hook is None:
            return
        try:
            hook(domain)
        except Exception as e:
            logger.error(f"Error in domain notification hook for {domain}: {e}")

    async def is_phishing(self, content: str) -> bool:
        """Check whether a message contains any link to a known phishing domain."""
        if not content:
            return False

        for host in self.scanner.extract_hostnames(content):
            if await self.is_phishing_domain(host):
                return True

        return False

    async def is_phishing_domain(self, domain: str) -> bool:
        """Check whether a domain is a known phishing site."""
        if is_official_domain(domain):
            return False

        while True:
            cached = self.cache.get(domain)
            if cached is not None:
                return cached

            pending = self._inflight.get(domain)
            if pending is None:
                break
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # The caller that owned the lookup was cancelled, not us; look again
                if not pending.cancelled():
                    raise

        future = asyncio.get_running_loop().create_future()
        self._inflight[domain] = future
        try:
            verdict = await self.remote.check_domain(domain)
            # A feed or refresh write that landed during the request wins
            verdict, inserted = self.cache.set_if_absent(domain, verdict)
            if inserted:
                self.cache.expire_after(domain, self.cache_period.total_seconds())
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited failure doesn't log a warning
            future.exception()
            raise
        else:
            future.set_result(verdict)
            return verdict
        finally:
            self._inflight.pop(domain, None)

    async def get_phishing_domains(self) -> list[str]:
        """Get the entire list of known phishing domains (never cached)."""
        return await self.remote.fetch_full_list()

    async def database_size(self) -> int:
        """Fetch the total number of flagged domains in the database."""
        return await self.remote.fetch_database_size()

    async def recent(self, duration: Union[int, float, timedelta]) -> list[Change]:
        """
        Fetch the domains added or deleted within the given window.

        Args:
            duration: Seconds or a timedelta, at most 7 days

        Raises:
            InvalidArgument: If the window is not positive or exceeds 7 days
        """
        if isinstance(duration, timedelta):
            seconds = int(duration.total_seconds())
        else:
            seconds = int(duration)

        if seconds > MAX_RECENT_SECONDS:
            raise InvalidArgument(f"Maximum value is {MAX_RECENT_SECONDS} seconds (7 days).")
        if seconds <= 0:
            raise InvalidArgument("Argument has to be positive.")

        return await self.remote.fetch_recent(seconds)

    def stats(self) -> dict:
        """Snapshot of client state for status commands and health checks."""
        cache_stats = self.cache.stats()
        data: dict = {
            "mode": self.mode.value,
            "cache_entries": cache_stats["entries"],
            "cache_flagged": cache_stats["flagged"],
            "cache_pending_expiries": cache_stats["pending_expiries"],
            "inflight_lookups": len(self._inflight),
        }
        if self.refresher:
            data["refresh_runs"] = self.refresher.runs
            data["refresh_failures"] = self.refresher.failures
            data["last_refresh"] = (
                self.refresher.last_success.isoformat() if self.refresher.last_success else None
            )
            data["last_refresh_error"] = self.refresher.last_error
        if self.feed:
            data["feed_state"] = self.feed.state.value
            data["feed_connected"] = int(self.feed.connected)
            data["feed_connect_attempts"] = self.feed.connect_attempts
            data["feed_messages"] = self.feed.messages_received
            data["feed_decode_errors"] = self.feed.decode_errors
        return data
