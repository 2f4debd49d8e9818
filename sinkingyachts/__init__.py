"""Python client for the Sinking Yachts phishing domain database."""

from .cache import ReputationCache
from .client import YachtsClient
from .errors import DecodeError, InvalidArgument, RemoteError, SinkingYachtsError
from .feed import LiveFeed
from .models import Change, ChangeType, ConnectionState, StorageMode
from .refresher import Refresher
from .remote import ReputationRemote
from .utils.domains import ContentScanner, extract_hostnames

__all__ = [
    "YachtsClient",
    "StorageMode",
    "Change",
    "ChangeType",
    "ConnectionState",
    "ReputationCache",
    "ReputationRemote",
    "Refresher",
    "LiveFeed",
    "ContentScanner",
    "extract_hostnames",
    "SinkingYachtsError",
    "RemoteError",
    "DecodeError",
    "InvalidArgument",
]
