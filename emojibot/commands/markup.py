"""HTML fragments sent through the rich chat (``admin 21``) channel."""

from __future__ import annotations

from collections.abc import Iterable
from html import escape

from ..emoji.models import EmojiRecord

_BOX_STYLE = (
    "background:#222;color:#fff;padding:8px 12px;"
    "border-radius:8px;font-family:sans-serif;"
)
_LIST_STYLE = "margin:4px 0 0 16px;padding:0;"


def render_help(prefix: str) -> str:
    p = escape(prefix)
    return (
        f"<div style='{_BOX_STYLE}'>"
        f"<b>EmojiBot Commands:</b><ul style='{_LIST_STYLE}'>"
        f"<li><b>{p}help</b> - Show this help</li>"
        f"<li><b>{p}emojilist</b> - List available emojis</li>"
        f"<li><b>{p}emoji &lt;name&gt;</b> - Send an emoji</li>"
        "</ul></div>"
    )


def render_emoji_list(emojis: Iterable[EmojiRecord]) -> str:
    items = "".join(
        f"<li><b>{escape(e.name)}</b>: {escape(e.description)} "
        f"<img src='{escape(e.web_address)}' alt='{escape(e.name)}' "
        "style='height:20px;vertical-align:middle;'></li>"
        for e in emojis
    )
    return (
        f"<div style='{_BOX_STYLE}'>"
        f"<b>Available Emojis:</b><ul style='{_LIST_STYLE}'>{items}</ul></div>"
    )


def render_emoji(emoji: EmojiRecord) -> str:
    return (
        f"<img src='{escape(emoji.web_address)}' alt='{escape(emoji.name)}' "
        "style='height:32px;'>"
    )
