"""Markdown compiler adapter backed by Python-Markdown."""

from __future__ import annotations

from typing import Iterable, Optional

import markdown

DEFAULT_EXTENSIONS = ("fenced_code", "tables", "sane_lists", "nl2br")


class PythonMarkdownCompiler:
    """MarkdownPort implementation.

    ``markdown.markdown`` builds a fresh ``Markdown`` instance per call, which
    keeps the compiler safe to share between threads.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None) -> None:
        self._extensions = list(extensions if extensions is not None else DEFAULT_EXTENSIONS)

    def compile(self, markup: str) -> str:
        return markdown.markdown(markup, extensions=self._extensions, output_format="html")
