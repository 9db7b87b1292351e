"""Response producers for the chat session.

Two responders share one interface, request(text, on_success, on_error):

  - TemplateResponder answers with a canned reply picked by keyword,
    after a delay run through an injected scheduler.
  - ApiResponder posts the text to the configured endpoint and hands the
    decoded body back for the session to interpret.

ResponseController ties a responder to a ChatSession.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from ..i18n import translate
from ..llm.client import TransportError

logger = logging.getLogger(__name__)

# scheduler(delay_ms, callback)
Scheduler = Callable[[int, Callable[[], None]], None]
# dispatcher(work, on_done, on_error): runs work() and reports its result
Dispatcher = Callable[[Callable[[], dict], Callable[[dict], None], Callable[[str], None]], None]


HELP_TEMPLATE = (
    "I'm here to help you with FreeCAD!\n\n"
    "**Common tasks:**\n"
    "- Create a new document: `File > New`\n"
    "- Start a sketch: Select a face and click the sketch icon\n"
    "- Create a pad: Exit sketch and use the pad tool\n\n"
    "What would you like to know more about?"
)

SKETCH_TEMPLATE = (
    "**Sketching in FreeCAD:**\n\n"
    "1. Select a plane or face in the 3D view\n"
    "2. Click the **Create Sketch** button\n"
    "3. Use the sketcher tools to draw geometry\n"
    "4. Add constraints to fully define your sketch\n"
    "5. Close the sketch when done\n\n"
    "Key shortcuts:\n"
    "- `C`: Toggle construction mode\n"
    "- `X`: Toggle cross-hatching\n"
    "- `Escape`: Exit current tool"
)

PAD_TEMPLATE = (
    "**Creating a Pad (Extrude):**\n\n"
    "1. First, create a closed sketch\n"
    "2. Exit the sketcher\n"
    "3. Select the sketch in the tree view\n"
    "4. Click the **Pad** tool or press `P`\n"
    "5. Set the length in the task panel\n"
    "6. Click OK to create the solid\n\n"
    "You can also create pads with:\n"
    "- Symmetric to plane\n"
    "- Reversed direction\n"
    "- Taper angle"
)

DEFAULT_TEMPLATE = (
    "Thank you for your message! I'm your FreeCAD AI assistant.\n\n"
    "I can help you with:\n"
    "- **Sketching** and part design\n"
    "- **Modeling** techniques and best practices\n"
    "- **FreeCAD commands** and shortcuts\n"
    "- **Troubleshooting** common issues\n\n"
    "What would you like to know?"
)


@dataclass(frozen=True)
class KeywordRule:
    name: str
    keywords: tuple[str, ...]
    template: str

    def matches(self, lowered: str) -> bool:
        return any(k in lowered for k in self.keywords)


# Checked in order; the first match wins
KEYWORD_RULES = (
    KeywordRule("help", ("help",), HELP_TEMPLATE),
    KeywordRule("sketch", ("sketch",), SKETCH_TEMPLATE),
    KeywordRule("pad", ("pad", "extrude"), PAD_TEMPLATE),
)


def select_rule(text: str) -> KeywordRule | None:
    lowered = text.lower()
    for rule in KEYWORD_RULES:
        if rule.matches(lowered):
            return rule
    return None


def select_template(text: str) -> str:
    """Return the (unformatted) canned reply for a user message."""
    rule = select_rule(text)
    template = rule.template if rule else DEFAULT_TEMPLATE
    return translate("ChatResponder", template)


def immediate_scheduler(delay_ms: int, callback: Callable[[], None]):
    """Run the callback right away, ignoring the delay."""
    callback()


def immediate_dispatcher(work, on_done, on_error):
    """Run the request on the calling thread."""
    try:
        result = work()
    except TransportError as e:
        on_error(str(e))
        return
    on_done(result)


class TemplateResponder:
    """Stand-in assistant that replies with keyword-selected templates."""

    result_handler = "resolve"

    def __init__(self, scheduler: Scheduler = immediate_scheduler, delay_ms: int = 1000):
        self.scheduler = scheduler
        self.delay_ms = delay_ms

    def request(self, text: str, on_success: Callable[[str], None],
                on_error: Callable[[str], None]):
        def _reply():
            rule = select_rule(text)
            logger.debug("Template reply: %s", rule.name if rule else "default")
            on_success(select_template(text))

        self.scheduler(self.delay_ms, _reply)


class ApiResponder:
    """Sends the message to the endpoint through an EndpointClient.

    on_success receives the raw response body (a dict); the session picks
    the reply out of it.
    """

    result_handler = "handle_api_response"

    def __init__(self, client, dispatcher: Dispatcher = immediate_dispatcher):
        self.client = client
        self.dispatcher = dispatcher

    def request(self, text: str, on_success: Callable[[dict], None],
                on_error: Callable[[str], None]):
        self.dispatcher(lambda: self.client.complete(text), on_success, on_error)


class ResponseController:
    """Submits text to a session and routes the responder's result back."""

    def __init__(self, session, responder):
        self.session = session
        self.responder = responder

    def send(self, text: str) -> bool:
        if not self.session.submit(text):
            return False

        # Tag callbacks with this request so a late reply can't close a newer one
        request_id = self.session.request_id
        handler = getattr(self.session, self.responder.result_handler)
        self.responder.request(
            text,
            lambda result: handler(result, request_id),
            lambda message: self.session.resolve_error(message, request_id),
        )
        return True
