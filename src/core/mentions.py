"""Mention extraction (core domain).

A mention is ``@name`` where the name runs until the next blank. Text is
normalized first so that line breaks and punctuation (other than ``@``)
terminate a name, e.g. ``@88250 It is a nice day. @Vanessa, we are on the
way.`` mentions ``88250`` and ``Vanessa``.

Candidates are confirmed against the member store; anything malformed or
unknown is dropped silently.
"""

from __future__ import annotations

import logging
import string
import unicodedata
from typing import Iterator, Optional

from core.config import MentionConfig
from core.directory import DirectoryIndex
from core.errors import MemberStoreError

LOGGER = logging.getLogger(__name__)

MENTION_MARK = "@"
HANDLE_CHARS = frozenset(string.ascii_letters + string.digits)
LINE_BREAKS = frozenset("\r\n")


def normalize_boundaries(text: str) -> str:
    """Turn line breaks and non-``@`` punctuation into blanks."""

    chars = []
    for ch in text.strip():
        if ch in LINE_BREAKS:
            chars.append(" ")
        elif ch == MENTION_MARK:
            chars.append(ch)
        elif unicodedata.category(ch).startswith("P"):
            chars.append(" ")
        else:
            chars.append(ch)
    return "".join(chars)


def scan_candidates(text: str) -> Iterator[str]:
    """Yield raw candidate tokens from normalized text.

    Every ``@`` outside a token opens one; a blank closes it. A token still
    open at the end of the text contributes only what follows its last
    ``@`` (so ``@alice@bob`` yields ``bob``).
    """

    inside = False
    buffer: list[str] = []
    for ch in text:
        if not inside:
            if ch == MENTION_MARK:
                inside = True
                buffer = []
            continue
        if ch == " ":
            yield "".join(buffer)
            inside = False
        else:
            buffer.append(ch)

    if inside:
        yield "".join(buffer).rpartition(MENTION_MARK)[2]


def is_valid_handle(candidate: str, config: MentionConfig) -> bool:
    if not candidate or len(candidate) > config.max_name_length:
        return False
    return all(ch in HANDLE_CHARS for ch in candidate)


def remove_mention(text: str, name: str) -> str:
    """Remove every ``@name`` not directly followed by another handle char."""

    token = MENTION_MARK + name
    parts = []
    pos = 0
    while True:
        hit = text.find(token, pos)
        if hit < 0:
            parts.append(text[pos:])
            break
        end = hit + len(token)
        if end < len(text) and text[end] in HANDLE_CHARS:
            parts.append(text[pos:end])
        else:
            parts.append(text[pos:hit])
        pos = end
    return "".join(parts)


class MentionExtractor:
    """Extracts confirmed member names from free text.

    Stateless apart from its collaborators, so one instance can serve any
    number of concurrent callers.
    """

    def __init__(self, directory: DirectoryIndex, config: Optional[MentionConfig] = None) -> None:
        self._directory = directory
        self._config = config or MentionConfig()

    def extract(self, text: str) -> set[str]:
        """Return the set of member names mentioned in ``text``."""

        if not text or MENTION_MARK not in text:
            return set()

        working = normalize_boundaries(text)
        confirmed: set[str] = set()
        looked_up: dict[str, Optional[str]] = {}

        # Consuming a confirmed mention can expose another one glued to it,
        # so rescan until a pass confirms nothing new.
        while MENTION_MARK in working:
            progressed = False
            for candidate in list(scan_candidates(working)):
                if not is_valid_handle(candidate, self._config):
                    continue
                name = self._confirm(candidate, looked_up)
                if name is None:
                    continue
                confirmed.add(name)
                remaining = remove_mention(working, candidate)
                if remaining != working:
                    working = remaining
                    progressed = True
            if not progressed:
                break

        return confirmed

    def _confirm(self, candidate: str, looked_up: dict[str, Optional[str]]) -> Optional[str]:
        if candidate in looked_up:
            return looked_up[candidate]
        try:
            member = self._directory.exists_exact(candidate)
        except MemberStoreError:
            # A transient fault only costs this candidate; it is retried if
            # a later pass sees it again.
            LOGGER.warning("Member lookup failed for mention candidate %r", candidate, exc_info=True)
            return None
        name = member.name if member else None
        looked_up[candidate] = name
        return name
