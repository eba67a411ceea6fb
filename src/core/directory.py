"""Username directory index (core domain).

The index holds an immutable snapshot of member handles sorted by name,
case-insensitive, in descending order. Reloads build a complete new tuple and
swap the reference in one assignment, so readers always see either the old
snapshot or the new one in full.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from core.config import DirectoryConfig
from core.errors import MemberStoreError
from core.models import DirectoryEntry, MemberRecord
from core.ports import MemberStorePort

LOGGER = logging.getLogger(__name__)

Snapshot = tuple[DirectoryEntry, ...]


def build_snapshot(entries, config: DirectoryConfig) -> Snapshot:
    """Normalize store rows into a sorted, sentinel-free snapshot."""

    normalized = []
    for entry in entries:
        if entry.name == config.null_user_name:
            continue
        avatar = entry.avatar_url
        if not avatar or not avatar.strip():
            avatar = config.default_avatar_url
        normalized.append(DirectoryEntry(name=entry.name, avatar_url=avatar))

    # Prefix search depends on this exact ordering; see _compare_to_prefix.
    normalized.sort(key=lambda item: item.name.lower(), reverse=True)
    return tuple(normalized)


def _compare_to_prefix(entry: DirectoryEntry, prefix: str) -> int:
    """Binary-search comparator treating a prefix hit as equality.

    Misses compare the raw prefix against the lowercased name, which only
    steers the search correctly because the snapshot is sorted descending.
    """

    name = entry.name.lower()
    if name.startswith(prefix.lower()):
        return 0
    if prefix < name:
        return -1
    if prefix > name:
        return 1
    return 0


def find_prefix_index(snapshot: Snapshot, prefix: str) -> int:
    """Return the index of some entry matching ``prefix``, or -1."""

    low = 0
    high = len(snapshot) - 1
    while low <= high:
        mid = (low + high) // 2
        cmp = _compare_to_prefix(snapshot[mid], prefix)
        if cmp < 0:
            low = mid + 1
        elif cmp > 0:
            high = mid - 1
        else:
            return mid
    return -1


class DirectoryIndex:
    """Refreshable, concurrently readable snapshot of member handles.

    Lifecycle: create at process start, call ``reload()`` on startup and on
    explicit triggers (e.g. a new member registered), ``close()`` on shutdown.
    """

    def __init__(self, store: MemberStorePort, config: Optional[DirectoryConfig] = None) -> None:
        self._store = store
        self._config = config or DirectoryConfig()
        self._snapshot: Snapshot = ()
        self._generation = 0
        # Serializes writers only; readers never take it.
        self._reload_lock = threading.Lock()

    @property
    def generation(self) -> int:
        """Number of snapshots installed so far."""

        return self._generation

    def snapshot(self) -> Snapshot:
        return self._snapshot

    def reload(self) -> bool:
        """Rebuild the snapshot from the store.

        Returns False and keeps the previous snapshot when the store fails.
        """

        with self._reload_lock:
            try:
                rows = list(self._store.fetch_all_valid_members())
            except MemberStoreError:
                LOGGER.exception("Loading member names failed, keeping %s cached entries", len(self._snapshot))
                return False

            snapshot = build_snapshot(rows, self._config)
            self._snapshot = snapshot
            self._generation += 1

        LOGGER.info("Directory reloaded: %s members (generation %s)", len(snapshot), self._generation)
        return True

    def close(self) -> None:
        """Drop the cached snapshot."""

        with self._reload_lock:
            self._snapshot = ()

    def exists_exact(self, name: str) -> Optional[MemberRecord]:
        """Authoritative lookup that bypasses the (possibly stale) snapshot.

        Store faults propagate as ``MemberStoreError``.
        """

        return self._store.find_by_exact_name(name)

    def prefix_search(self, prefix: str, limit: Optional[int] = None) -> list[DirectoryEntry]:
        """Return up to ``limit`` entries starting at a prefix hit.

        The window runs forward from whichever matching entry the binary
        search lands on; it is not centered and may skip earlier matches.
        It ends at the snapshot end or at the first entry not matching.
        """

        if limit is None:
            limit = self._config.prefix_limit
        # One read of the reference pins a single generation for this call.
        snapshot = self._snapshot
        if not snapshot or limit <= 0:
            return []

        index = find_prefix_index(snapshot, prefix)
        if index < 0:
            return []

        lowered = prefix.lower()
        results = []
        for entry in snapshot[index : min(index + limit, len(snapshot))]:
            # Matches are contiguous, so the first miss ends the window.
            if not entry.name.lower().startswith(lowered):
                break
            results.append(entry)
        return results
