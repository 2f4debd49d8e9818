"""Domain reputation cache.

Maps a lowercase host to its phishing verdict:
- True: known phishing domain
- False: checked and clean, or removed from the database
- absent: never seen

Supports:
- Thread-safe get/set from query callers, the refresher and the live feed
- Full-list reconciliation that flips verdicts but never drops keys
- One-shot expiry for entries cached by on-demand lookups
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Counts from a reconciliation pass."""

    flagged: int = 0
    cleared: int = 0
    added: int = 0


class ReputationCache:
    """
    In-memory verdict cache shared by every write path of a client.

    Usage:
        cache = ReputationCache()

        cache.set("evil.example", True)
        cache.get("evil.example")  # True
        cache.get("unknown.example")  # None

        # Resync against the full remote list
        cache.reconcile({"evil.example", "other.example"})

        # Drop an on-demand entry later (needs a running event loop)
        cache.expire_after("checked.example", 3 * 3600)
    """

    def __init__(self):
        self._entries: Dict[str, bool] = {}
        self._expiries: Dict[str, asyncio.TimerHandle] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, domain: str) -> bool:
        with self._lock:
            return domain in self._entries

    def get(self, domain: str) -> Optional[bool]:
        """
        Get the cached verdict for a domain.

        Returns:
            True/False verdict, or None if the domain is not cached
        """
        with self._lock:
            return self._entries.get(domain)

    def set(self, domain: str, verdict: bool) -> None:
        """Insert or overwrite a verdict."""
        with self._lock:
            self._entries[domain] = bool(verdict)

    def set_if_absent(self, domain: str, verdict: bool) -> tuple[bool, bool]:
        """
        Insert a verdict only if the domain is not cached yet.

        Used by on-demand lookups so a result fetched before a concurrent
        feed or refresh write never overwrites that newer verdict.

        Returns:
            (stored verdict, whether this call inserted it)
        """
        with self._lock:
            current = self._entries.get(domain)
            if current is not None:
                return current, False
            self._entries[domain] = bool(verdict)
            return bool(verdict), True

    def delete(self, domain: str) -> None:
        """Delete a cached verdict (no-op if absent)."""
        with self._lock:
            self._entries.pop(domain, None)
            handle = self._expiries.pop(domain, None)
        if handle is not None:
            handle.cancel()

    def reconcile(self, full_list: Iterable[str]) -> ReconcileResult:
        """
        Resync verdicts against the complete remote domain list.

        Every cached domain becomes True if it is listed and False otherwise;
        listed domains that are not cached yet are inserted as True. Keys are
        never removed, so the cache only grows.

        Args:
            full_list: Every domain currently in the remote database

        Returns:
            ReconcileResult with the number of flipped and inserted keys
        """
        listed = set(full_list)
        listed.discard("")
        result = ReconcileResult()

        with self._lock:
            for domain, verdict in self._entries.items():
                present = domain in listed
                if present and not verdict:
                    result.flagged += 1
                elif verdict and not present:
                    result.cleared += 1
                self._entries[domain] = present

            for domain in listed:
                if domain not in self._entries:
                    self._entries[domain] = True
                    result.added += 1

        return result

    def expire_after(self, domain: str, seconds: float) -> None:
        """
        Schedule a one-shot removal of a domain.

        A newer expiry for the same domain replaces the pending one. Zero or
        negative durations remove the key immediately.

        Args:
            domain: Cache key to remove
            seconds: Delay before removal
        """
        if seconds <= 0:
            self.delete(domain)
            return

        loop = asyncio.get_running_loop()
        with self._lock:
            previous = self._expiries.pop(domain, None)
            if previous is not None:
                previous.cancel()
            self._expiries[domain] = loop.call_later(seconds, self._expire, domain)

    def _expire(self, domain: str) -> None:
        with self._lock:
            self._expiries.pop(domain, None)
            removed = self._entries.pop(domain, None)
        if removed is not None:
            logger.debug(f"Cache entry expired: {domain}")

    def close(self) -> None:
        """Cancel all pending expiries (entries are kept)."""
        with self._lock:
            handles = list(self._expiries.values())
            self._expiries.clear()
        for handle in handles:
            handle.cancel()

    def snapshot(self) -> Dict[str, bool]:
        """Return a copy of the current mapping."""
        with self._lock:
            return dict(self._entries)

    def stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        with self._lock:
            flagged = sum(1 for v in self._entries.values() if v)
            return {
                "entries": len(self._entries),
                "flagged": flagged,
                "cleared": len(self._entries) - flagged,
                "pending_expiries": len(self._expiries),
            }
