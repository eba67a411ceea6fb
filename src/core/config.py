"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_AVATAR_URL = "https://static.agora.example/images/user-thumbnail.png"
NULL_USER_NAME = "_"


@dataclass(frozen=True)
class DirectoryConfig:
    """Directory index settings."""

    default_avatar_url: str = DEFAULT_AVATAR_URL
    null_user_name: str = NULL_USER_NAME
    prefix_limit: int = 4


@dataclass(frozen=True)
class MentionConfig:
    """Member handle syntax used when validating mention candidates."""

    max_name_length: int = 20


@dataclass(frozen=True)
class Whitelist:
    """Tags and attributes the sanitizer is permitted to retain."""

    tags: frozenset[str] = frozenset()
    attributes: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    protocols: frozenset[str] = frozenset({"http", "https", "mailto"})


# An empty whitelist strips every tag; previews always use it.
EMPTY_WHITELIST = Whitelist()


@dataclass(frozen=True)
class RenderConfig:
    """Rendering settings consumed by the content renderer."""

    serve_path: str
    whitelist: Whitelist
    preview_max_chars: int = 150
    preview_marker: str = " ...."
    content_blocked_label: str = "This content has been blocked."
    discussion_label: str = "This is a discussion, only {user} and the members invited can view it."
