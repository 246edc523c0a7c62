from __future__ import annotations

from typing import Sequence


class ContextWindow:
    """Bounded read-only views over one file's lines.

    Rules use these instead of slicing the line list themselves so that every
    look-behind and look-ahead is capped by a named window size.
    """

    def __init__(self, lines: Sequence[str]):
        self._lines = tuple(lines)

    def __len__(self) -> int:
        return len(self._lines)

    def line(self, index: int) -> str:
        return self._lines[index]

    def trailing(self, index: int, size: int) -> tuple[str, ...]:
        """Up to ``size`` lines before ``index``, oldest first."""
        size = max(0, size)
        start = max(0, index - size)
        return self._lines[start:max(start, index)]

    def leading(self, index: int, size: int) -> tuple[str, ...]:
        """Up to ``size`` lines after ``index``."""
        size = max(0, size)
        start = min(len(self._lines), index + 1)
        return self._lines[start:min(len(self._lines), start + size)]

    def previous(self, index: int) -> str | None:
        window = self.trailing(index, 1)
        return window[0] if window else None

    def next(self, index: int) -> str | None:
        window = self.leading(index, 1)
        return window[0] if window else None
