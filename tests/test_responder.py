"""Tests for keyword routing and the response responders."""

import pytest

from freecad_ai_chat.core.message import Role
from freecad_ai_chat.core.responder import (
    DEFAULT_TEMPLATE,
    HELP_TEMPLATE,
    PAD_TEMPLATE,
    SKETCH_TEMPLATE,
    ApiResponder,
    ResponseController,
    TemplateResponder,
    select_template,
)
from freecad_ai_chat.core.session import ChatSession
from freecad_ai_chat.llm.client import TransportError


@pytest.mark.parametrize("text, expected", [
    ("HELP me sketch something", HELP_TEMPLATE),
    ("How do I sketch a circle?", SKETCH_TEMPLATE),
    ("Let's PAD this", PAD_TEMPLATE),
    ("extrude the profile", PAD_TEMPLATE),
    ("sketch then extrude", SKETCH_TEMPLATE),
    ("draw a square", DEFAULT_TEMPLATE),
])
def test_keyword_routing_first_match_wins(text, expected):
    assert select_template(text) == expected


def test_templates_keep_unformatted_markup():
    assert "**Sketching in FreeCAD:**" in SKETCH_TEMPLATE
    assert "<b>" not in SKETCH_TEMPLATE


class _DeferredScheduler:
    """Holds scheduled callbacks until the test fires them."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay_ms, callback):
        self.pending.append((delay_ms, callback))

    def fire(self):
        for _, callback in self.pending:
            callback()
        self.pending.clear()


def test_template_responder_uses_scheduler_delay():
    scheduler = _DeferredScheduler()
    session = ChatSession()
    controller = ResponseController(session, TemplateResponder(scheduler, delay_ms=1000))

    assert controller.send("help") is True
    assert session.waiting_for_response
    assert scheduler.pending[0][0] == 1000

    scheduler.fire()
    assert not session.waiting_for_response
    assert session.history[-1].role is Role.ASSISTANT
    assert session.history[-1].content == HELP_TEMPLATE


def test_controller_blocks_second_send_until_resolved():
    scheduler = _DeferredScheduler()
    session = ChatSession()
    controller = ResponseController(session, TemplateResponder(scheduler))

    controller.send("one")
    assert controller.send("two") is False
    assert len(scheduler.pending) == 1

    scheduler.fire()
    assert controller.send("two") is True


def test_controller_ignores_blank_input():
    scheduler = _DeferredScheduler()
    controller = ResponseController(ChatSession(), TemplateResponder(scheduler))
    assert controller.send("   ") is False
    assert scheduler.pending == []


def test_immediate_template_response():
    session = ChatSession()
    ResponseController(session, TemplateResponder()).send("draw a square")
    assert session.history[-1].content == DEFAULT_TEMPLATE
    assert not session.waiting_for_response


class _FakeClient:
    def __init__(self, body=None, error=None):
        self.body = body
        self.error = error
        self.sent = []

    def complete(self, text):
        self.sent.append(text)
        if self.error:
            raise self.error
        return self.body


def test_api_responder_resolves_from_first_choice():
    client = _FakeClient({"choices": [{"message": {"content": "Use Pad."}}]})
    session = ChatSession()
    ResponseController(session, ApiResponder(client)).send("  how to pad  ")

    assert client.sent == ["  how to pad  "]
    assert session.history[-1].role is Role.ASSISTANT
    assert session.history[-1].content == "Use Pad."
    assert not session.waiting_for_response


def test_api_transport_error_becomes_system_message():
    client = _FakeClient(error=TransportError("Connection error: refused"))
    session = ChatSession()
    errors = []
    session.connect("error_occurred", errors.append)

    ResponseController(session, ApiResponder(client)).send("hello")

    assert errors == ["Connection error: refused"]
    assert session.history[-1].role is Role.SYSTEM
    assert session.history[-1].content == "Error: Connection error: refused"
    assert not session.waiting_for_response


def test_api_empty_choices_leaves_request_pending():
    client = _FakeClient({"choices": []})
    session = ChatSession()
    ResponseController(session, ApiResponder(client)).send("hello")

    assert session.history[-1].role is Role.USER
    assert session.waiting_for_response


def test_reply_from_before_clear_does_not_answer_next_question():
    scheduler = _DeferredScheduler()
    session = ChatSession()
    controller = ResponseController(session, TemplateResponder(scheduler))

    controller.send("help me")
    old_reply = scheduler.pending.pop()[1]
    session.clear()
    controller.send("draw a square")

    old_reply()
    assert session.history[-1].role is Role.USER
    assert session.waiting_for_response

    scheduler.fire()
    assert session.history[-1].content == DEFAULT_TEMPLATE
    assert [m.role for m in session.history] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]


def test_transport_error_from_before_clear_is_dropped():
    failures = []
    session = ChatSession()

    def deferred(work, on_done, on_error):
        failures.append(on_error)

    controller = ResponseController(session, ApiResponder(_FakeClient(), deferred))
    controller.send("one")
    session.clear()
    controller.send("two")

    failures[0]("Connection error: refused")
    assert session.waiting_for_response
    assert session.history[-1].content == "two"
