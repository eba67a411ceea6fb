"""Visibility gate for content previews (core domain)."""

from __future__ import annotations

from typing import AbstractSet, Optional

from core.models import ContentItem, ContentKind, Visibility


def evaluate_visibility(
    item: ContentItem,
    viewer_id: Optional[str],
    viewer_name: Optional[str],
    mentions: AbstractSet[str],
) -> Visibility:
    """Decide whether a viewer may see the real body of ``item``.

    Rules, in order:
    - An invalid author account or an invalid item is blocked for everyone.
    - A discussion is invite-only unless the viewer is its author or is
      mentioned in the body.
    - Everything else is visible.
    """

    if not item.author_account_valid or not item.valid:
        return Visibility.BLOCKED

    if item.kind is ContentKind.DISCUSSION:
        if viewer_id is not None and viewer_id == item.author_id:
            return Visibility.VISIBLE
        if viewer_name and viewer_name in mentions:
            return Visibility.VISIBLE
        return Visibility.INVITE_ONLY

    return Visibility.VISIBLE
