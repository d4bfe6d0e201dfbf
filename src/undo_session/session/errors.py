"""Failure kinds raised inside the store and logged at its boundary."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class UndoSessionError(RuntimeError):
    """Base class; ``kind`` and ``level`` drive the emitted diagnostic."""

    kind = "session"
    level = "warning"

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class StaleSessionError(UndoSessionError):
    """The stored header no longer matches the buffer contents."""

    kind = "stale"
    level = "info"


class CorruptSessionError(UndoSessionError):
    """A stored record is malformed, or a value cannot be stored."""

    kind = "corrupt"


class SessionIOError(UndoSessionError):
    """Reading, writing or creating session files failed."""

    kind = "io"


class EvictionError(UndoSessionError):
    """A session file could not be scanned or removed during eviction."""

    kind = "eviction"


__all__ = [
    "CorruptSessionError",
    "EvictionError",
    "SessionIOError",
    "StaleSessionError",
    "UndoSessionError",
]
