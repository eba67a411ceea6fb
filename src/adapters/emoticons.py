"""Emoticon shortcode adapter.

Replaces ``:name:`` shortcodes for known names with an image tag pointing at
the static emoji graphics. Unknown shortcodes are left as typed.
"""

from __future__ import annotations

import html
import re
from typing import Iterable

SHORTCODE_RE = re.compile(r":([a-z0-9_+\-]+):")

DEFAULT_EMOTICONS = (
    "smile",
    "laughing",
    "heart",
    "thumbsup",
    "thumbsdown",
    "cry",
    "joy",
    "wink",
    "confused",
    "sweat_smile",
    "+1",
    "-1",
)


class EmoticonTable:
    """EmoticonPort implementation with a fixed set of shortcode names."""

    def __init__(self, static_path: str, names: Iterable[str] = DEFAULT_EMOTICONS) -> None:
        self._static_path = static_path.rstrip("/")
        self._names = frozenset(names)

    def image_tag(self, name: str) -> str:
        safe = html.escape(name, quote=True)
        return f'<img class="emoji" src="{self._static_path}/emoji/graphics/{safe}.png" title="{safe}">'

    def substitute(self, markup: str) -> str:
        def replace(match: re.Match) -> str:
            name = match.group(1)
            if name not in self._names:
                return match.group(0)
            return self.image_tag(name)

        return SHORTCODE_RE.sub(replace, markup)
