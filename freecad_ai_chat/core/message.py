"""Chat message model.

A message has a role, a text body and a creation timestamp. Loading
placeholders carry ``is_loading=True`` and are never written to disk.

Persisted shape (one JSON object per message):
  {"role": 0|1|2, "content": "...", "timestamp": "2024-05-01T12:30:00"}
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class FormatError(ValueError):
    """Conversation data does not have the expected JSON shape."""
    pass


class Role(IntEnum):
    USER = 0
    ASSISTANT = 1
    SYSTEM = 2


def _now() -> datetime:
    # Second precision, matching what the ISO timestamps on disk can hold
    return datetime.now().replace(microsecond=0)


@dataclass
class ChatMessage:
    """A single entry in the conversation log."""

    role: Role
    content: str = ""
    timestamp: datetime = field(default_factory=_now)
    is_loading: bool = False

    def to_dict(self) -> dict:
        return {
            "role": int(self.role),
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, obj) -> "ChatMessage":
        """Build a message from its persisted form.

        Raises FormatError if a field is missing, has the wrong type,
        or the role is not one of the known values.
        """
        if not isinstance(obj, dict):
            raise FormatError(f"Message entry must be an object, got {type(obj).__name__}")

        for key in ("role", "content", "timestamp"):
            if key not in obj:
                raise FormatError(f"Message entry is missing '{key}'")

        role = obj["role"]
        # bool is an int subclass; true/false are not valid roles
        if not isinstance(role, int) or isinstance(role, bool):
            raise FormatError(f"Invalid role: {role!r}")
        try:
            role = Role(role)
        except ValueError:
            raise FormatError(f"Unknown role: {role}")

        content = obj["content"]
        if not isinstance(content, str):
            raise FormatError("Message content must be a string")

        stamp = obj["timestamp"]
        if not isinstance(stamp, str):
            raise FormatError("Message timestamp must be a string")
        # fromisoformat only accepts a trailing "Z" from Python 3.11 on
        if stamp.endswith(("Z", "z")):
            stamp = stamp[:-1] + "+00:00"
        try:
            timestamp = datetime.fromisoformat(stamp)
        except ValueError:
            raise FormatError(f"Invalid timestamp: {stamp!r}")

        return cls(role=role, content=content, timestamp=timestamp)

    def key(self) -> tuple:
        """The (role, content, timestamp) triple that survives persistence."""
        return (self.role, self.content, self.timestamp)
