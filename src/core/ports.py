"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the member store and the text
transform capabilities so that the core can be reused with different
backends and markup libraries.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from core.config import Whitelist
from core.models import DirectoryEntry, MemberRecord


class MemberStorePort(Protocol):
    """Member lookups required by the directory index and the renderer.

    Implementations raise ``MemberStoreError`` on backend faults and return
    ``None`` when a member does not exist.
    """

    def fetch_all_valid_members(self) -> Iterable[DirectoryEntry]:
        ...

    def find_by_exact_name(self, name: str) -> Optional[MemberRecord]:
        ...

    def find_by_id(self, member_id: str) -> Optional[MemberRecord]:
        ...


class ArticleTitlePort(Protocol):
    """Title lookups used by the default short-link resolver."""

    def get_article_title(self, article_id: str) -> Optional[str]:
        ...


class ShortLinkPort(Protocol):
    def expand(self, markup: str) -> str:
        ...


class EmoticonPort(Protocol):
    def substitute(self, markup: str) -> str:
        ...


class MarkdownPort(Protocol):
    def compile(self, markup: str) -> str:
        ...


class SanitizerPort(Protocol):
    def clean(self, html: str, whitelist: Whitelist) -> str:
        ...
