"""SQLite member store adapter.

Implements the core MemberStorePort and ArticleTitlePort using a simple
SQLite database.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from core.config import NULL_USER_NAME
from core.errors import MemberStoreError
from core.models import DirectoryEntry, MemberRecord

STATUS_VALID = 0
STATUS_INVALID = 1


class SQLiteMemberStore:
    """Thin SQLite wrapper that satisfies the MemberStorePort contract."""

    def __init__(self, db_path: str, null_user_name: str = NULL_USER_NAME) -> None:
        self._db_path = db_path
        self._null_user_name = null_user_name

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        # Every database fault surfaces as the retryable store error.
        try:
            with self._connect() as conn:
                yield conn
        except sqlite3.Error as e:
            raise MemberStoreError(f"Member store failure: {e}") from e

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - members: public handles plus account status
        - articles: titles used when expanding article short links
        """

        with self._session() as conn:
            # Fields:
            # - id: opaque member id (PRIMARY KEY)
            # - name: unique handle, matched exactly (case-sensitive)
            # - avatar_url: may be empty; the directory substitutes a default
            # - status: 0 valid, 1 invalid (banned or deactivated)
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS members (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    avatar_url TEXT NOT NULL DEFAULT '',
                    status INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS articles (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL
                )
                """
            )

    def add_member(self, name: str, avatar_url: str = "", valid: bool = True, member_id: Optional[str] = None) -> str:
        """Insert a member and return its id."""

        member_id = member_id or uuid.uuid4().hex
        status = STATUS_VALID if valid else STATUS_INVALID
        with self._session() as conn:
            conn.execute(
                "INSERT INTO members (id, name, avatar_url, status) VALUES (?, ?, ?, ?)",
                (member_id, name, avatar_url or "", status),
            )
        return member_id

    def add_article(self, article_id: str, title: str) -> None:
        """Upsert an article title."""

        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO articles (id, title) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET title = excluded.title
                """,
                (article_id, title),
            )

    def fetch_all_valid_members(self) -> list[DirectoryEntry]:
        """Return name and avatar of every valid, non-sentinel member."""

        with self._session() as conn:
            rows = conn.execute(
                "SELECT name, avatar_url FROM members WHERE name != ? AND status = ?",
                (self._null_user_name, STATUS_VALID),
            ).fetchall()
        return [DirectoryEntry(name=row["name"], avatar_url=row["avatar_url"] or "") for row in rows]

    def find_by_exact_name(self, name: str) -> Optional[MemberRecord]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT id, name, avatar_url, status FROM members WHERE name = ?",
                (name,),
            ).fetchone()
        return _to_record(row)

    def find_by_id(self, member_id: str) -> Optional[MemberRecord]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT id, name, avatar_url, status FROM members WHERE id = ?",
                (member_id,),
            ).fetchone()
        return _to_record(row)

    def get_article_title(self, article_id: str) -> Optional[str]:
        with self._session() as conn:
            row = conn.execute("SELECT title FROM articles WHERE id = ?", (article_id,)).fetchone()
        return row["title"] if row else None


def _to_record(row: Optional[sqlite3.Row]) -> Optional[MemberRecord]:
    if row is None:
        return None
    return MemberRecord(
        id=row["id"],
        name=row["name"],
        avatar_url=row["avatar_url"] or "",
        valid=int(row["status"]) == STATUS_VALID,
    )
