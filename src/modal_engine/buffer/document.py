"""Core document data structures for modal_engine buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence, Tuple

Lines = Tuple[str, ...]


def split_lines(text: str) -> Lines:
    """Split ``text`` on newlines; a trailing newline yields an empty last line."""

    return tuple(text.split("\n"))


@dataclass(frozen=True, slots=True)
class BufferDocument:
    """Immutable text storage built on a tuple-of-lines model.

    Edits never mutate a document; they return a new one whose tuple reuses
    every untouched line object, so snapshots taken for undo share storage
    with the live document instead of copying it.
    """

    lines: Lines = field(default=("",))
    version: int = 0

    def __post_init__(self) -> None:
        if not self.lines:
            object.__setattr__(self, "lines", ("",))

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(lines=split_lines(text))

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return self.lines

    def replace(self, *, lines: Iterable[str]) -> "BufferDocument":
        """Return a new document with the provided lines and bumped version."""

        return BufferDocument(lines=tuple(lines), version=self.version + 1)

    def update_lines(
        self, start: int, end: int, new_lines: Iterable[str]
    ) -> "BufferDocument":
        """Return a document with ``[start:end]`` replaced by ``new_lines``."""

        updated = self.lines[:start] + tuple(new_lines) + self.lines[end:]
        return BufferDocument(lines=updated, version=self.version + 1)

    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def get_line(self, index: int) -> str:
        return self.lines[index]


__all__ = ["BufferDocument", "Lines", "split_lines"]
