"""Message rendering helpers for the chat panel.

Converts chat messages with light markdown-ish formatting into HTML for
the panel's QTextBrowser. Formatting is display-only: the message content
stored in the session is never changed.

There is no escape syntax, so a literal '*' or '`' pair is always read
as markup.
"""

import html
import re

from ..core.message import ChatMessage, Role
from ..i18n import translate

# Match **bold**
BOLD_RE = re.compile(r"\*\*(.+?)\*\*")

# Match *italic*
ITALIC_RE = re.compile(r"\*(.+?)\*")

# Match inline `code`
INLINE_CODE_RE = re.compile(r"`(.+?)`")

CODE_STYLE = "background-color: #e8e8e8; padding: 2px; font-family: monospace;"

# label, bubble background, label colour
ROLE_STYLES = {
    Role.USER: ("You", "#e3f2fd", "#1565c0"),
    Role.ASSISTANT: ("AI", "#f5f5f5", "#2e7d32"),
    Role.SYSTEM: ("System", "#fff3e0", "#e65100"),
}


def format_content(text: str) -> str:
    """Convert markdown-ish text to HTML.

    Rules run in order, each as a single pass: **bold**, *italic*,
    `code`, then newlines become <br>. Bold runs first so that paired
    double asterisks are consumed before italics are matched.
    """
    text = html.escape(text, quote=False)
    text = BOLD_RE.sub(r"<b>\1</b>", text)
    text = ITALIC_RE.sub(r"<i>\1</i>", text)
    text = INLINE_CODE_RE.sub(rf'<code style="{CODE_STYLE}">\1</code>', text)
    return text.replace("\n", "<br>")


def render_message(message: ChatMessage) -> str:
    """Render a single chat message as an HTML block.

    A loading placeholder renders as a greyed "Thinking..." bubble.
    """
    label, bg_color, label_color = ROLE_STYLES[message.role]
    label = translate("MessageView", label)

    if message.is_loading:
        body = (
            '<span style="color: #888; font-style: italic;">'
            f'{translate("MessageView", "Thinking...")}</span>'
        )
    else:
        body = format_content(message.content)

    return (
        f'<div style="margin: 8px 0; padding: 8px 12px; '
        f'background-color: {bg_color}; border-radius: 6px;">'
        f'<div style="font-weight: bold; color: {label_color}; '
        f'margin-bottom: 4px;">{label} '
        f'<span style="font-weight: normal; color: #999; font-size: 10px;">'
        f'{message.timestamp.strftime("%H:%M")}</span></div>'
        f'<div>{body}</div>'
        f'</div>'
    )


def render_conversation(messages: list[ChatMessage]) -> str:
    return "".join(render_message(m) for m in messages)
