"""Content rendering pipeline (core domain).

Full renders run a strict sequence of text transforms:
1) Link confirmed ``@name`` mentions to member profiles
2) Expand short links (article and tag references)
3) Substitute emoticon shortcodes
4) Compile markdown to HTML
5) Sanitize against the configured whitelist

Previews consult the visibility gate first and then run only steps 3-5 with
an empty whitelist before truncating the plain text.

This module is integration-agnostic. It only relies on ports for member
lookups and text transforms, so every stage can be swapped or faked.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.config import EMPTY_WHITELIST, RenderConfig
from core.mentions import HANDLE_CHARS, MENTION_MARK, MentionExtractor
from core.models import ContentItem, ContentKind, RenderResult, Visibility
from core.ports import EmoticonPort, MarkdownPort, MemberStorePort, SanitizerPort, ShortLinkPort
from core.visibility import evaluate_visibility

LOGGER = logging.getLogger(__name__)


def profile_url(serve_path: str, name: str) -> str:
    return f"{serve_path}/member/{name}"


def profile_link(serve_path: str, name: str) -> str:
    return f"<a href='{profile_url(serve_path, name)}'>{name}</a>"


def link_mention(markup: str, name: str, serve_path: str) -> str:
    """Rewrite each standalone ``@name`` into ``@<a ...>name</a>``."""

    token = MENTION_MARK + name
    replacement = MENTION_MARK + profile_link(serve_path, name)
    parts = []
    pos = 0
    while True:
        hit = markup.find(token, pos)
        if hit < 0:
            parts.append(markup[pos:])
            break
        end = hit + len(token)
        parts.append(markup[pos:hit])
        # "@bob" inside "@bobby" belongs to a different handle.
        if end < len(markup) and markup[end] in HANDLE_CHARS:
            parts.append(token)
        else:
            parts.append(replacement)
        pos = end
    return "".join(parts)


class ContentRenderer:
    """Orchestrates mention linking, text transforms and sanitizing."""

    def __init__(
        self,
        extractor: MentionExtractor,
        members: MemberStorePort,
        short_links: ShortLinkPort,
        emoticons: EmoticonPort,
        markdown: MarkdownPort,
        sanitizer: SanitizerPort,
        config: RenderConfig,
    ) -> None:
        self._extractor = extractor
        self._members = members
        self._short_links = short_links
        self._emoticons = emoticons
        self._markdown = markdown
        self._sanitizer = sanitizer
        self._config = config

    def link_mentions(self, markup: str) -> str:
        """Stage 1: turn confirmed mentions into profile links."""

        names = self._extractor.extract(markup)
        # Longest first keeps output independent of set iteration order.
        for name in sorted(names, key=lambda value: (-len(value), value)):
            markup = link_mention(markup, name, self._config.serve_path)
        return markup

    def expand_short_links(self, markup: str) -> str:
        return self._short_links.expand(markup)

    def substitute_emoticons(self, markup: str) -> str:
        return self._emoticons.substitute(markup)

    def compile_markdown(self, markup: str) -> str:
        return self._markdown.compile(markup)

    def sanitize(self, html: str) -> str:
        return self._sanitizer.clean(html, self._config.whitelist)

    def _sanitize_preview(self, html: str) -> str:
        return self._sanitizer.clean(html, EMPTY_WHITELIST)

    def _full_stages(self) -> list[Callable[[str], str]]:
        return [
            self.link_mentions,
            self.expand_short_links,
            self.substitute_emoticons,
            self.compile_markdown,
            self.sanitize,
        ]

    def _preview_stages(self) -> list[Callable[[str], str]]:
        return [
            self.substitute_emoticons,
            self.compile_markdown,
            self._sanitize_preview,
        ]

    def render_full(self, markup: str) -> str:
        """Render markup to sanitized HTML.

        Collaborator faults propagate; no partial HTML is returned.
        """

        if not markup or not markup.strip():
            return ""

        text = markup
        for stage in self._full_stages():
            text = stage(text)
        return text

    def visibility_for(self, item: ContentItem, viewer_id: Optional[str]) -> Visibility:
        """Evaluate the visibility gate for ``viewer_id`` on ``item``."""

        if not item.author_account_valid or not item.valid:
            return evaluate_visibility(item, viewer_id, None, frozenset())

        mentions: set[str] = set()
        viewer_name = None
        # Mentions only matter for discussions read by someone other than the author.
        if item.kind is ContentKind.DISCUSSION and viewer_id != item.author_id:
            mentions = self._extractor.extract(item.body_markup)
            if viewer_id is not None:
                viewer = self._members.find_by_id(viewer_id)
                viewer_name = viewer.name if viewer else None
        return evaluate_visibility(item, viewer_id, viewer_name, mentions)

    def render_preview(self, item: ContentItem, viewer_id: Optional[str]) -> RenderResult:
        """Render a length-bounded, permission-gated preview of ``item``."""

        visibility = self.visibility_for(item, viewer_id)
        if visibility is Visibility.BLOCKED:
            LOGGER.debug("Preview of %s blocked", item.id)
            return RenderResult(html=self._config.content_blocked_label, truncated=False)
        if visibility is Visibility.INVITE_ONLY:
            notice = self._config.discussion_label.replace(
                "{user}", profile_link(self._config.serve_path, item.author_name)
            )
            return RenderResult(html=notice, truncated=False)

        text = item.body_markup or ""
        for stage in self._preview_stages():
            text = stage(text)

        max_chars = self._config.preview_max_chars
        if len(text) > max_chars:
            return RenderResult(html=text[:max_chars] + self._config.preview_marker, truncated=True)
        return RenderResult(html=text, truncated=False)
