"""Message formatters for the Telegram example bot."""

from dataclasses import dataclass
from typing import Optional

from ..models import Change, ChangeType

PHISHING_REPLY = "Phishing links are not allowed."


@dataclass
class RecentSummary:
    """Added/deleted counts over a lookback window."""

    hours: float
    added: int = 0
    deleted: int = 0

    @classmethod
    def from_changes(cls, changes: list[Change], hours: float) -> "RecentSummary":
        summary = cls(hours=hours)
        for change in changes:
            if change.type is ChangeType.ADD:
                summary.added += 1
            elif change.type is ChangeType.DELETE:
                summary.deleted += 1
        return summary


class BotFormatter:
    """Formats bot replies and announcements."""

    @staticmethod
    def format_help() -> str:
        return (
            "*Available Commands:*\n\n"
            "/status - Database size and cache status\n"
            "/recent [hours] - Domains added/deleted recently (max 168h)\n"
            "/help - Show this help\n\n"
            "Messages containing links to known phishing domains are deleted automatically."
        )

    @staticmethod
    def format_status(database_size: Optional[int], stats: dict) -> str:
        lines = ["*Sinking Yachts Status*", ""]
        if database_size is None:
            lines.append("Database size: unavailable")
        else:
            lines.append(f"Protecting against *{database_size:,}* phishing domains")
        lines.append(f"Mode: `{stats.get('mode', 'unknown')}`")
        lines.append(
            f"Cache: {stats.get('cache_entries', 0)} domains ({stats.get('cache_flagged', 0)} flagged)"
        )

        if "last_refresh" in stats:
            last = stats.get("last_refresh") or "never"
            lines.append(f"Last refresh: {last}")
            if stats.get("last_refresh_error"):
                lines.append(f"Last refresh error: {stats['last_refresh_error']}")
        if "feed_state" in stats:
            lines.append(f"Live feed: {stats['feed_state']}")

        return "\n".join(lines)

    @staticmethod
    def format_recent(summary: RecentSummary) -> str:
        window = f"{summary.hours:g}h"
        return (
            f"*Changes in the past {window}:*\n"
            f"Added: {summary.added}\n"
            f"Deleted: {summary.deleted}"
        )

    @staticmethod
    def format_domain_event(domain: str, added: bool) -> str:
        if added:
            return f"New phishing domain added: `{domain}`"
        return f"Domain removed from the database: `{domain}`"
