"""Head/tail windowing for long render lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_LIMIT = 5000
DEFAULT_HEAD = 500
DEFAULT_TAIL = 2000


@dataclass(frozen=True, slots=True)
class WindowSlice:
    """Which part of a list of ``total`` items gets rendered.

    Items ``[0, head_end)`` and ``[tail_start, total)`` are shown; everything
    in between is omitted. When not truncated, ``head_end == tail_start == total``.
    """

    total: int
    head_end: int
    tail_start: int

    @property
    def omitted(self) -> int:
        return self.tail_start - self.head_end

    @property
    def truncated(self) -> bool:
        return self.omitted > 0

    def is_omitted(self, index: int) -> bool:
        return self.head_end <= index < self.tail_start

    def take[T](self, items: Sequence[T]) -> tuple[list[T], list[T]]:
        """The head and tail parts of items (tail empty when not truncated)."""
        if not self.truncated:
            return list(items), []
        return list(items[: self.head_end]), list(items[self.tail_start :])


class TruncationWindow:
    """Decides between a full render and a head+tail slice.

    Once show-all is on it stays on until ``reset`` starts a new session.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT, head: int = DEFAULT_HEAD, tail: int = DEFAULT_TAIL) -> None:
        if limit < 1 or head < 0 or tail < 0:
            msg = f"Invalid truncation window: limit={limit}, head={head}, tail={tail}"
            raise ValueError(msg)
        self.limit = limit
        self.head = head
        self.tail = tail
        self.show_all = False

    def slice(self, total: int) -> WindowSlice:
        if self.show_all or total <= self.limit or self.head + self.tail >= total:
            return WindowSlice(total, total, total)
        return WindowSlice(total, self.head, total - self.tail)

    def focus(self, index: int, total: int) -> bool:
        """Make sure index is rendered. Returns True if this switched to show-all."""
        if self.show_all or not self.slice(total).is_omitted(index):
            return False
        self.show_all = True
        return True

    def show_everything(self) -> None:
        self.show_all = True

    def reset(self) -> None:
        self.show_all = False
