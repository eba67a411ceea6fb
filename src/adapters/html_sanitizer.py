"""HTML sanitizer adapter backed by bleach.

Disallowed tags are stripped rather than escaped, so an empty whitelist
reduces a document to its text.
"""

from __future__ import annotations

import bleach

from core.config import Whitelist


class BleachSanitizer:
    """SanitizerPort implementation."""

    def clean(self, html: str, whitelist: Whitelist) -> str:
        attributes = {tag: list(names) for tag, names in whitelist.attributes.items()}
        return bleach.clean(
            html,
            tags=set(whitelist.tags),
            attributes=attributes,
            protocols=set(whitelist.protocols),
            strip=True,
            strip_comments=True,
        )
