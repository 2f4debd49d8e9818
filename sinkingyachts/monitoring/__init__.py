"""Health endpoints for sinkingyachts."""

from .health import HealthServer

__all__ = ["HealthServer"]
