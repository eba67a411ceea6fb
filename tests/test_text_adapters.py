from __future__ import annotations

from typing import Optional

from adapters.emoticons import EmoticonTable
from adapters.html_sanitizer import BleachSanitizer
from adapters.markdown_compiler import PythonMarkdownCompiler
from adapters.short_links import ShortLinkResolver
from core.config import EMPTY_WHITELIST, MentionConfig, RenderConfig, Whitelist
from core.directory import DirectoryIndex
from core.mentions import MentionExtractor
from core.models import ContentItem, DirectoryEntry, MemberRecord
from core.renderer import ContentRenderer

SERVE = "https://forum.test"
STATIC = "https://static.forum.test"
WHITELIST = Whitelist(
    tags=frozenset({"a", "p", "strong", "em", "img", "code", "pre", "br"}),
    attributes={"a": ("href",), "img": ("src", "class", "title")},
)


class FakeArticles:
    def __init__(self, titles: dict[str, str]) -> None:
        self._titles = titles

    def get_article_title(self, article_id: str) -> Optional[str]:
        return self._titles.get(article_id)


class FakeStore:
    def __init__(self, names: list[str]) -> None:
        self._names = names

    def fetch_all_valid_members(self) -> list[DirectoryEntry]:
        return [DirectoryEntry(name=name, avatar_url="") for name in self._names]

    def find_by_exact_name(self, name: str) -> Optional[MemberRecord]:
        if name in self._names:
            return MemberRecord(id=f"id-{name}", name=name, avatar_url="")
        return None

    def find_by_id(self, member_id: str) -> Optional[MemberRecord]:
        return None


def _renderer() -> ContentRenderer:
    store = FakeStore(["alice", "bob"])
    directory = DirectoryIndex(store)
    directory.reload()
    return ContentRenderer(
        extractor=MentionExtractor(directory, MentionConfig()),
        members=store,
        short_links=ShortLinkResolver(SERVE, FakeArticles({"42": "Release notes"})),
        emoticons=EmoticonTable(STATIC, ["smile"]),
        markdown=PythonMarkdownCompiler(),
        sanitizer=BleachSanitizer(),
        config=RenderConfig(serve_path=SERVE, whitelist=WHITELIST),
    )


def test_emoticon_table_replaces_known_shortcodes_only() -> None:
    table = EmoticonTable(STATIC + "/", ["smile"])
    out = table.substitute("hi :smile: and :unknown:")
    assert out == (
        f'hi <img class="emoji" src="{STATIC}/emoji/graphics/smile.png" title="smile"> and :unknown:'
    )


def test_short_links_expand_articles_with_known_titles() -> None:
    resolver = ShortLinkResolver(SERVE, FakeArticles({"42": "Release notes"}))
    out = resolver.expand(f"read {SERVE}/article/42 and {SERVE}/article/43")
    assert out == f"read [Release notes]({SERVE}/article/42) and {SERVE}/article/43"


def test_short_links_leave_urls_inside_links_alone() -> None:
    resolver = ShortLinkResolver(SERVE, FakeArticles({"42": "Release notes"}))
    markup = f"[here]({SERVE}/article/42) or <a href='{SERVE}/article/42'>x</a>"
    assert resolver.expand(markup) == markup


def test_short_links_expand_tags() -> None:
    resolver = ShortLinkResolver(SERVE, FakeArticles({}))
    assert resolver.expand("#python# rocks, not#this#") == f"[python]({SERVE}/tag/python) rocks, not#this#"


def test_markdown_compiler_renders_basic_markup() -> None:
    html = PythonMarkdownCompiler().compile("**bold** and *em*")
    assert html == "<p><strong>bold</strong> and <em>em</em></p>"


def test_bleach_sanitizer_strips_disallowed_markup() -> None:
    html = BleachSanitizer().clean('<p onclick="x()">hi<script>bad()</script></p>', WHITELIST)
    assert "<script" not in html
    assert "onclick" not in html
    assert html.startswith("<p>hi")


def test_bleach_sanitizer_with_empty_whitelist_keeps_text_only() -> None:
    html = BleachSanitizer().clean("<p><strong>bold</strong> text</p>", EMPTY_WHITELIST)
    assert html == "bold text"


def test_full_render_with_real_adapters() -> None:
    html = _renderer().render_full(f"hey @alice :smile: **read** {SERVE}/article/42 <script>x()</script>")
    assert f'href="{SERVE}/member/alice"' in html
    assert f'src="{STATIC}/emoji/graphics/smile.png"' in html
    assert "<strong>read</strong>" in html
    assert f'<a href="{SERVE}/article/42">Release notes</a>' in html
    assert "<script" not in html


def test_preview_with_real_adapters_is_plain_text() -> None:
    item = ContentItem(id="1", author_id="id-alice", author_name="alice", body_markup="**Hello** @bob :smile:")
    result = _renderer().render_preview(item, None)
    assert result.html == "Hello @bob "
    assert result.truncated is False
