"""Short-link resolver adapter.

Two kinds of reference are expanded into markdown links:
- bare article URLs (``{serve_path}/article/<id>``) whose title is known
- ``#tag#`` tokens, linked to the tag page

Only references that start a line or follow a blank are touched, so URLs
already inside links or attributes are left alone.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from core.ports import ArticleTitlePort

TAG_RE = re.compile(r"(?:(?<=\s)|^)#([\w\-]{1,50})#", re.MULTILINE)


class ShortLinkResolver:
    """ShortLinkPort implementation."""

    def __init__(self, serve_path: str, articles: ArticleTitlePort) -> None:
        self._serve_path = serve_path.rstrip("/")
        self._articles = articles
        self._article_re = re.compile(
            r"(?:(?<=\s)|^)(" + re.escape(self._serve_path) + r"/article/(\d+))(?![\w/])",
            re.MULTILINE,
        )

    def link_articles(self, markup: str) -> str:
        def replace(match: re.Match) -> str:
            url, article_id = match.group(1), match.group(2)
            title = self._articles.get_article_title(article_id)
            if not title:
                return url
            return f"[{_escape_link_text(title)}]({url})"

        return self._article_re.sub(replace, markup)

    def link_tags(self, markup: str) -> str:
        def replace(match: re.Match) -> str:
            tag = match.group(1)
            return f"[{tag}]({self._serve_path}/tag/{quote(tag)})"

        return TAG_RE.sub(replace, markup)

    def expand(self, markup: str) -> str:
        return self.link_tags(self.link_articles(markup))


def _escape_link_text(text: str) -> str:
    return text.replace("[", "\\[").replace("]", "\\]")
