"""Persist and restore editing-buffer undo history across sessions."""

__all__ = [
    "buffer",
    "history",
    "runtime",
    "session",
]

__version__ = "0.1.0"
