"""Tests for the chat message model."""

from datetime import datetime, timedelta, timezone

import pytest

from freecad_ai_chat.core.message import ChatMessage, FormatError, Role


def test_to_dict_uses_integer_role_and_iso_timestamp():
    msg = ChatMessage(Role.ASSISTANT, "hi", timestamp=datetime(2024, 5, 1, 12, 30))
    assert msg.to_dict() == {
        "role": 1,
        "content": "hi",
        "timestamp": "2024-05-01T12:30:00",
    }


def test_loading_flag_is_not_serialized():
    msg = ChatMessage(Role.ASSISTANT, "", is_loading=True)
    assert "is_loading" not in msg.to_dict()


def test_from_dict_restores_fields():
    msg = ChatMessage.from_dict(
        {"role": 2, "content": "note", "timestamp": "2024-05-01T08:00:00"}
    )
    assert msg.role is Role.SYSTEM
    assert msg.content == "note"
    assert msg.timestamp == datetime(2024, 5, 1, 8, 0)
    assert msg.is_loading is False


@pytest.mark.parametrize("obj", [
    {"content": "x", "timestamp": "2024-05-01T08:00:00"},
    {"role": 0, "timestamp": "2024-05-01T08:00:00"},
    {"role": 0, "content": "x"},
    {"role": 7, "content": "x", "timestamp": "2024-05-01T08:00:00"},
    {"role": True, "content": "x", "timestamp": "2024-05-01T08:00:00"},
    {"role": "0", "content": "x", "timestamp": "2024-05-01T08:00:00"},
    {"role": 0, "content": 5, "timestamp": "2024-05-01T08:00:00"},
    {"role": 0, "content": "x", "timestamp": "yesterday"},
    ["not", "an", "object"],
])
def test_from_dict_rejects_invalid_entries(obj):
    with pytest.raises(FormatError):
        ChatMessage.from_dict(obj)


def test_new_messages_have_whole_second_timestamps():
    assert ChatMessage(Role.USER, "x").timestamp.microsecond == 0


@pytest.mark.parametrize("stamp", ["2024-05-01T08:00:00Z", "2024-05-01T08:00:00+00:00"])
def test_utc_timestamps_parse_the_same_on_every_python(stamp):
    msg = ChatMessage.from_dict({"role": 0, "content": "x", "timestamp": stamp})
    assert msg.timestamp == datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    assert msg.timestamp.utcoffset() == timedelta(0)
