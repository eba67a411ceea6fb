from __future__ import annotations

from typing import Iterable, Optional

from core.config import MentionConfig
from core.directory import DirectoryIndex
from core.errors import MemberStoreError
from core.mentions import (
    MentionExtractor,
    is_valid_handle,
    normalize_boundaries,
    remove_mention,
    scan_candidates,
)
from core.models import DirectoryEntry, MemberRecord


class FakeStore:
    def __init__(self, names: Iterable[str], failing: Iterable[str] = ()) -> None:
        self.names = set(names)
        self.failing = set(failing)
        self.lookups: list[str] = []

    def fetch_all_valid_members(self) -> list[DirectoryEntry]:
        return [DirectoryEntry(name=name, avatar_url="x") for name in self.names]

    def find_by_exact_name(self, name: str) -> Optional[MemberRecord]:
        self.lookups.append(name)
        if name in self.failing:
            raise MemberStoreError("connection reset")
        if name in self.names:
            return MemberRecord(id=f"id-{name}", name=name, avatar_url="x")
        return None

    def find_by_id(self, member_id: str) -> Optional[MemberRecord]:
        return None


def _extractor(names: Iterable[str], failing: Iterable[str] = ()) -> tuple[MentionExtractor, FakeStore]:
    store = FakeStore(names, failing)
    return MentionExtractor(DirectoryIndex(store), MentionConfig(max_name_length=20)), store


def test_basic_mentions() -> None:
    extractor, _ = _extractor(["alice", "bob"])
    assert extractor.extract("@alice hi @bob!") == {"alice", "bob"}


def test_text_without_at_sign_skips_lookups() -> None:
    extractor, store = _extractor(["alice"])
    assert extractor.extract("no mentions here") == set()
    assert store.lookups == []


def test_empty_text() -> None:
    extractor, _ = _extractor(["alice"])
    assert extractor.extract("") == set()


def test_unknown_member_is_dropped() -> None:
    extractor, _ = _extractor(["alice"])
    assert extractor.extract("hello @ghost") == set()


def test_trailing_comma_terminates_name() -> None:
    extractor, _ = _extractor(["bob"])
    assert extractor.extract("Hi @bob, how are you?") == {"bob"}


def test_line_break_terminates_name() -> None:
    extractor, _ = _extractor(["alice", "bob"])
    assert extractor.extract("@alice\n@bob") == {"alice", "bob"}
    assert extractor.extract("@alice\r\nthanks") == {"alice"}


def test_unterminated_tail_token_is_a_candidate() -> None:
    extractor, _ = _extractor(["bob"])
    assert extractor.extract("thanks @bob") == {"bob"}


def test_full_width_punctuation_terminates_name() -> None:
    extractor, _ = _extractor(["bob"])
    assert extractor.extract("@bob，你好") == {"bob"}


def test_underscore_is_punctuation_and_splits_name() -> None:
    extractor, _ = _extractor(["bob"])
    assert extractor.extract("@bob_smith hello") == {"bob"}


def test_symbol_is_not_a_terminator() -> None:
    # "$" is a currency symbol, not punctuation, so "bob$" stays one token.
    extractor, _ = _extractor(["bob"])
    assert extractor.extract("@bob$ pays") == set()


def test_bare_at_sign_is_ignored() -> None:
    extractor, store = _extractor(["alice"])
    assert extractor.extract("meet @ noon") == set()
    assert store.lookups == []


def test_name_length_limit() -> None:
    twenty = "a" * 20
    twenty_one = "b" * 21
    extractor, _ = _extractor([twenty, twenty_one])
    assert extractor.extract(f"@{twenty} and @{twenty_one} here") == {twenty}


def test_glued_mentions_are_found_by_rescan() -> None:
    extractor, _ = _extractor(["alice", "bob"])
    assert extractor.extract("@alice@bob") == {"alice", "bob"}


def test_glued_mentions_followed_by_text_are_dropped() -> None:
    # "alice@bob" is closed by the blank and fails validation, and no token is
    # left open at the end, so the first pass confirms nothing.
    extractor, _ = _extractor(["alice", "bob"])
    assert extractor.extract("@alice@bob hi") == set()


def test_duplicates_collapse_and_lookup_once() -> None:
    extractor, store = _extractor(["bob"])
    assert extractor.extract("@bob @bob @bob") == {"bob"}
    assert store.lookups == ["bob"]


def test_store_fault_only_drops_that_candidate() -> None:
    extractor, _ = _extractor(["alice", "bob"], failing=["bob"])
    assert extractor.extract("@bob and @alice") == {"alice"}


def test_normalize_boundaries() -> None:
    assert normalize_boundaries("  Hi @bob, ok?\n") == "Hi @bob  ok "
    assert normalize_boundaries("@a.b") == "@a b"
    assert normalize_boundaries("x@y") == "x@y"


def test_scan_candidates_between_and_tail() -> None:
    assert list(scan_candidates("@alice hi @bob")) == ["alice", "bob"]
    assert list(scan_candidates("@alice hi @bob ")) == ["alice", "bob"]
    assert list(scan_candidates("@a@b")) == ["b"]
    assert list(scan_candidates("@a@b c")) == ["a@b"]
    assert list(scan_candidates("no marks")) == []


def test_is_valid_handle() -> None:
    config = MentionConfig(max_name_length=5)
    assert is_valid_handle("bob42", config)
    assert not is_valid_handle("", config)
    assert not is_valid_handle("toolong", config)
    assert not is_valid_handle("b-b", config)
    assert not is_valid_handle("b@b", config)


def test_remove_mention_keeps_longer_handles() -> None:
    assert remove_mention("@bob @bobby x", "bob") == " @bobby x"
    assert remove_mention("@alice@bob", "bob") == "@alice"
