"""Exceptions raised by the sinkingyachts client."""

from __future__ import annotations


class SinkingYachtsError(Exception):
    """Base exception for client errors."""

    pass


class RemoteError(SinkingYachtsError):
    """The reputation API answered with an error status or an unreadable body."""

    def __init__(self, status_code: int, message: str, response_body: str = ""):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        super().__init__(f"API error {status_code}: {message}")


class DecodeError(SinkingYachtsError):
    """A live feed frame could not be decoded into a change event."""

    def __init__(self, message: str, raw: str = ""):
        self.message = message
        self.raw = raw
        super().__init__(message)


class InvalidArgument(SinkingYachtsError, ValueError):
    """A caller supplied an out-of-range argument."""

    pass
