"""Core error types."""

from __future__ import annotations


class MemberStoreError(RuntimeError):
    """Backing member store fault.

    Raised for I/O or database failures, never for a missing member (that is
    reported as ``None``). Callers may retry.
    """
