"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class DirectoryEntry:
    """A member's public handle as held by the directory snapshot."""

    name: str
    avatar_url: str


@dataclass(frozen=True)
class MemberRecord:
    """Full member row returned by authoritative store lookups."""

    id: str
    name: str
    avatar_url: str
    valid: bool = True


class ContentKind(Enum):
    NORMAL = "normal"
    DISCUSSION = "discussion"


@dataclass(frozen=True)
class ContentItem:
    """Article or comment read by the renderer; never persisted by the core."""

    id: str
    author_id: str
    author_name: str
    body_markup: str
    kind: ContentKind = ContentKind.NORMAL
    author_account_valid: bool = True
    valid: bool = True


@dataclass(frozen=True)
class RenderResult:
    html: str
    truncated: bool = False


class Visibility(Enum):
    """Outcome of the visibility gate."""

    VISIBLE = "visible"
    BLOCKED = "blocked"
    INVITE_ONLY = "invite_only"

