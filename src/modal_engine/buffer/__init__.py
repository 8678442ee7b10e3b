"""Buffer abstractions and undo/redo data structures."""

from .buffer import Buffer, BufferCheckpoint, BufferDelta, Transaction
from .document import BufferDocument
from .registers import RegisterBank, RegisterValue
from .state import END_OF_LINE, BufferState, Cursor
from .sync import BufferMirror
from .undo import Snapshot, UndoTimeline
from .validation import OutOfRangeError, ensure_cursor

__all__ = [
    "BufferDocument",
    "BufferState",
    "Cursor",
    "END_OF_LINE",
    "RegisterBank",
    "RegisterValue",
    "UndoTimeline",
    "Snapshot",
    "Buffer",
    "BufferCheckpoint",
    "BufferDelta",
    "Transaction",
    "BufferMirror",
    "OutOfRangeError",
    "ensure_cursor",
]
