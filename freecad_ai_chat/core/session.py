"""Chat session: the conversation log and its single pending-response slot.

The session starts Idle. submit() moves it to Pending and opens the slot;
resolve() or resolve_error() close it again. While Pending, further
submissions are ignored. A loading placeholder exists only while Pending
and is never part of the history.

Listeners subscribe by event name:
  - message_sent(text)
  - response_received(content)
  - error_occurred(message)
"""

import json
import logging
from enum import Enum
from typing import Callable

from ..config import EndpointStore, MemoryPreferences
from ..i18n import translate
from .message import ChatMessage, FormatError, Role

logger = logging.getLogger(__name__)

EVENTS = ("message_sent", "response_received", "error_occurred")


def welcome_text() -> str:
    return translate(
        "ChatSession",
        "Welcome to FreeCAD AI Assistant!\n\n"
        "You can ask questions about:\n"
        "• CAD modeling techniques\n"
        "• FreeCAD commands and workflows\n"
        "• Part design and sketching\n"
        "• And much more!\n\n"
        "Configure your API settings using the gear button above.",
    )


def cleared_text() -> str:
    return translate("ChatSession", "Conversation cleared. How can I help you?")


class PendingState(Enum):
    IDLE = "idle"
    PENDING = "pending"


class ChatSession:
    """In-memory conversation state for one chat panel."""

    def __init__(self, preferences: EndpointStore | None = None):
        self.preferences = preferences if preferences is not None else MemoryPreferences()
        self.api_endpoint = self.preferences.get_endpoint()
        self.history: list[ChatMessage] = [ChatMessage(Role.SYSTEM, welcome_text())]
        self.state = PendingState.IDLE
        self.loading_message: ChatMessage | None = None
        self.request_id = 0
        self._listeners: dict[str, list[Callable]] = {name: [] for name in EVENTS}

    # ── Events ──────────────────────────────────────────────

    def connect(self, event: str, callback: Callable):
        if event not in self._listeners:
            raise ValueError(f"Unknown session event: {event}")
        self._listeners[event].append(callback)

    def disconnect(self, event: str, callback: Callable):
        if callback in self._listeners.get(event, []):
            self._listeners[event].remove(callback)

    def _emit(self, event: str, *args):
        for callback in list(self._listeners[event]):
            callback(*args)

    # ── State ───────────────────────────────────────────────

    @property
    def waiting_for_response(self) -> bool:
        return self.state is PendingState.PENDING

    def visible_messages(self) -> list[ChatMessage]:
        """History plus the loading placeholder, if one is showing."""
        if self.loading_message is not None:
            return self.history + [self.loading_message]
        return list(self.history)

    def _accepts(self, request_id: int | None) -> bool:
        """True if a reply for request_id may close the current slot."""
        if not self.waiting_for_response:
            return False
        return request_id is None or request_id == self.request_id

    def _close_slot(self):
        self.loading_message = None
        self.state = PendingState.IDLE

    # ── Operations ──────────────────────────────────────────

    def submit(self, text: str) -> bool:
        """Append a user message and open the pending slot.

        Returns False, with no state change, for blank text or while a
        response is still pending.
        """
        stripped = text.strip()
        if not stripped:
            logger.debug("Ignoring empty submission")
            return False
        if self.waiting_for_response:
            logger.debug("Ignoring submission while a response is pending")
            return False

        self.history.append(ChatMessage(Role.USER, stripped))
        self.request_id += 1
        self.loading_message = ChatMessage(Role.ASSISTANT, "", is_loading=True)
        self.state = PendingState.PENDING
        self._emit("message_sent", text)
        return True

    def resolve(self, content: str, request_id: int | None = None) -> bool:
        """Close the pending slot with an assistant reply.

        A reply tagged with an older request_id (cleared, or superseded by
        a later submission) is dropped.
        """
        if not self._accepts(request_id):
            logger.debug("Dropping stale or unexpected response (request %s)", request_id)
            return False
        self.history.append(ChatMessage(Role.ASSISTANT, content))
        self._close_slot()
        self._emit("response_received", content)
        return True

    def resolve_error(self, message: str, request_id: int | None = None) -> bool:
        """Close the pending slot with a system error message."""
        if not self._accepts(request_id):
            logger.debug("Dropping stale or unexpected error: %s", message)
            return False
        logger.warning("Response failed: %s", message)
        self.history.append(ChatMessage(
            Role.SYSTEM, translate("ChatSession", "Error: {}").format(message)
        ))
        self._close_slot()
        self._emit("error_occurred", message)
        return True

    def handle_api_response(self, data: dict, request_id: int | None = None) -> bool:
        """Resolve with the first choice of a chat-completions body.

        A body without a non-empty choices array is ignored and the slot
        stays open.
        """
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            logger.debug("API response has no choices, ignoring")
            return False
        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return self.resolve(content if isinstance(content, str) else "", request_id)

    def clear(self):
        """Drop the whole history, leaving a single confirmation message."""
        self.history = [ChatMessage(Role.SYSTEM, cleared_text())]
        self._close_slot()

    def set_api_endpoint(self, endpoint: str):
        self.api_endpoint = endpoint
        self.preferences.set_endpoint(endpoint)

    # ── Persistence ─────────────────────────────────────────

    def save(self) -> bytes:
        """Serialize the history as a JSON array."""
        data = [msg.to_dict() for msg in self.history]
        return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")

    def load(self, data: bytes | str):
        """Replace the history with the messages in a saved JSON array.

        Raises FormatError and leaves the session untouched if the data
        is not a JSON array of valid message objects.
        """
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FormatError(f"Invalid JSON: {e}")
        if not isinstance(parsed, list):
            raise FormatError("Conversation data must be a JSON array")

        messages = [ChatMessage.from_dict(obj) for obj in parsed]
        self.history = messages
        self._close_slot()

    def save_file(self, path: str) -> bool:
        try:
            with open(path, "wb") as f:
                f.write(self.save())
        except OSError as e:
            logger.error("Failed to save conversation to %s: %s", path, e)
            return False
        logger.info("Saved %d messages to %s", len(self.history), path)
        return True

    def load_file(self, path: str) -> bool:
        try:
            with open(path, "rb") as f:
                data = f.read()
            self.load(data)
        except (OSError, FormatError) as e:
            logger.error("Failed to load conversation from %s: %s", path, e)
            return False
        logger.info("Loaded %d messages from %s", len(self.history), path)
        return True
