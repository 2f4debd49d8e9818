"""Live feed for sinkingyachts."""

from .live_feed import LiveFeed

__all__ = ["LiveFeed"]
