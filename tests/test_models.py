import pytest

from sinkingyachts.errors import DecodeError
from sinkingyachts.models import Change, ChangeType, StorageMode, decode_change


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("on_demand", StorageMode.ON_DEMAND),
        ("remote", StorageMode.ON_DEMAND),
        ("", StorageMode.ON_DEMAND),
        ("polling", StorageMode.POLLING),
        ("Local", StorageMode.POLLING),
        ("polling_feed", StorageMode.POLLING_FEED),
        ("LocalWS", StorageMode.POLLING_FEED),
        ("local-ws", StorageMode.POLLING_FEED),
    ],
)
def test_storage_mode_parse(raw, expected):
    assert StorageMode.parse(raw) is expected


def test_storage_mode_parse_rejects_unknown():
    with pytest.raises(ValueError):
        StorageMode.parse("sometimes")


def test_storage_mode_flags():
    assert not StorageMode.ON_DEMAND.polls
    assert StorageMode.POLLING.polls and not StorageMode.POLLING.uses_feed
    assert StorageMode.POLLING_FEED.polls and StorageMode.POLLING_FEED.uses_feed


def test_decode_change_add_frame():
    change = decode_change('{"type":"add","domains":["evil.example"]}')
    assert change == Change(type=ChangeType.ADD, domains=["evil.example"])


def test_decode_change_accepts_bytes_and_uppercase_type():
    change = decode_change(b'{"type":"DELETE","domains":["a.example","b.example"]}')
    assert change.type is ChangeType.DELETE
    assert change.domains == ["a.example", "b.example"]


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '{"type":"rename","domains":["a.example"]}',
        '{"type":"add","domains":"a.example"}',
        '{"type":"add","domains":[1]}',
    ],
)
def test_decode_change_rejects_malformed_frames(raw):
    with pytest.raises(DecodeError) as exc_info:
        decode_change(raw)
    assert exc_info.value.raw == raw


def test_change_to_dict():
    change = Change(type=ChangeType.ADD, domains=["evil.example"])
    assert change.to_dict() == {"type": "add", "domains": ["evil.example"]}
