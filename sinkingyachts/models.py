"""Shared enums and data types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import DecodeError


class StorageMode(str, Enum):
    """How phishing domains are stored and loaded."""

    ON_DEMAND = "on_demand"  # Cache each domain after its first lookup
    POLLING = "polling"  # Full list cached up front, resynced every 15 minutes
    POLLING_FEED = "polling_feed"  # Polling plus the live WebSocket feed

    @classmethod
    def parse(cls, value: "str | StorageMode | None") -> "StorageMode":
        """Parse a mode name, accepting the upstream library's names as aliases."""
        if isinstance(value, cls):
            return value
        raw = (value or "").strip().lower().replace("-", "_")
        if not raw:
            return cls.ON_DEMAND
        aliases = {
            "remote": cls.ON_DEMAND,
            "ondemand": cls.ON_DEMAND,
            "local": cls.POLLING,
            "localws": cls.POLLING_FEED,
            "local_ws": cls.POLLING_FEED,
            "pollingfeed": cls.POLLING_FEED,
        }
        if raw in aliases:
            return aliases[raw]
        try:
            return cls(raw)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown storage mode {value!r}; expected one of: {valid}") from None

    @property
    def polls(self) -> bool:
        return self in (StorageMode.POLLING, StorageMode.POLLING_FEED)

    @property
    def uses_feed(self) -> bool:
        return self is StorageMode.POLLING_FEED


class ChangeType(str, Enum):
    """Type of a database change."""

    ADD = "add"
    DELETE = "delete"


class ConnectionState(str, Enum):
    """Live feed connection state."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class Change:
    """A batch of domains added to or deleted from the database.

    The feed always sends a single domain per event, but the list shape
    allows bulk imports.
    """

    type: ChangeType
    domains: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Change":
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        try:
            change_type = ChangeType(str(data.get("type", "")).lower())
        except ValueError:
            raise ValueError(f"unknown change type {data.get('type')!r}") from None
        domains = data.get("domains")
        if not isinstance(domains, list) or not all(isinstance(d, str) for d in domains):
            raise ValueError("'domains' must be a list of strings")
        return cls(type=change_type, domains=list(domains))

    def to_dict(self) -> dict:
        return {"type": self.type.value, "domains": list(self.domains)}


def decode_change(raw: str | bytes) -> Change:
    """Decode one feed frame into a Change, raising DecodeError on bad input."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Frame is not valid UTF-8: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed JSON frame: {e}", raw=raw) from e
    try:
        return Change.from_dict(data)
    except ValueError as e:
        raise DecodeError(f"Invalid change event: {e}", raw=raw) from e
