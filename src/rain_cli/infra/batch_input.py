"""Batch input from standard input.

Commands that accept either one positional or a piped list read the
list through :class:`BatchInput`.  An interactive terminal never counts
as batch input, so ``rain add`` without arguments fails fast instead of
waiting for keyboard input.
"""

from __future__ import annotations

import sys
from typing import TextIO


class BatchInput:
    """Lazy line reader over a text stream (``sys.stdin`` by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream: TextIO = stream if stream is not None else sys.stdin

    def available(self) -> bool:
        """``True`` when the stream is piped (not a terminal)."""
        stream = self._stream
        if stream is None or getattr(stream, "closed", False):
            return False
        isatty = getattr(stream, "isatty", None)
        return not (callable(isatty) and isatty())

    def lines(self) -> list[str]:
        """Non-blank, trimmed lines."""
        if not self.available():
            return []
        return [line.strip() for line in self._stream.read().splitlines() if line.strip()]
