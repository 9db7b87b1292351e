"""Tests for the markdown-ish message formatter."""

from freecad_ai_chat.core.message import ChatMessage, Role
from freecad_ai_chat.ui.message_view import CODE_STYLE, format_content, render_message


def test_bold_italic_code_and_line_break():
    text = "**bold** and *italic* and `code`\nline2"
    assert format_content(text) == (
        f'<b>bold</b> and <i>italic</i> and <code style="{CODE_STYLE}">code</code>'
        "<br>line2"
    )


def test_formatting_does_not_touch_stored_content():
    msg = ChatMessage(Role.ASSISTANT, "**bold**\nnext")
    render_message(msg)
    assert msg.content == "**bold**\nnext"


def test_bold_is_matched_before_italic():
    assert format_content("**a** *b*") == "<b>a</b> <i>b</i>"


def test_bold_match_is_non_greedy():
    assert format_content("**a** b **c**") == "<b>a</b> b <b>c</b>"


def test_unpaired_markers_are_left_alone():
    assert format_content("2 * 3 = 6") == "2 * 3 = 6"


def test_html_is_escaped():
    assert format_content("a < b & c") == "a &lt; b &amp; c"


def test_literal_asterisks_have_no_escape():
    # Known limitation: there is no way to write a literal *pair*
    assert format_content(r"\*not italic\*") == r"\<i>not italic\</i>"


def test_loading_message_renders_thinking_placeholder():
    html = render_message(ChatMessage(Role.ASSISTANT, "", is_loading=True))
    assert "Thinking..." in html


def test_role_labels():
    assert ">You " in render_message(ChatMessage(Role.USER, "x"))
    assert ">AI " in render_message(ChatMessage(Role.ASSISTANT, "x"))
    assert ">System " in render_message(ChatMessage(Role.SYSTEM, "x"))
