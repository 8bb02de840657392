"""SPDX-License-Identifier: GPL-3.0-only

Result window bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass

from .formatter import window_label


class InvalidNavigation(Exception):
    """Raised when a page move is not possible (state is left unchanged)."""


@dataclass
class PageWindow:
    """Zero-based ``[start, end)`` slice of the ranked result set.

    Attributes:
        page_size: Results per page.
        start: Offset of the first displayed result.
        end: Offset one past the last requested result.
    """

    page_size: int = 10
    start: int = 0
    end: int = 0

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")
        if self.end <= self.start:
            self.end = self.start + self.page_size

    def reset(self) -> None:
        self.start = 0
        self.end = self.page_size

    def next(self) -> None:
        # No upper bound: a short or empty page is a valid end state.
        self.start = self.end
        self.end = self.end + self.page_size

    def previous(self) -> None:
        if self.start <= 0:
            raise InvalidNavigation("Already at the beginning")
        self.end = self.start
        self.start = max(0, self.start - self.page_size)

    @property
    def count(self) -> int:
        return self.end - self.start

    @property
    def label(self) -> str:
        return window_label(self.start, self.end)
