"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument


class BufferValidationError(RuntimeError):
    """Raised when an edit addresses a position outside the buffer."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


def ensure_position(document: BufferDocument, position: int) -> int:
    if position < 0 or position > document.size:
        raise BufferValidationError("Position out of range", position=position)
    return position


def ensure_range(document: BufferDocument, start: int, end: int) -> tuple[int, int]:
    start = ensure_position(document, start)
    end = ensure_position(document, end)
    if start > end:
        start, end = end, start
    return start, end
