"""Session files: configuration, naming, record format and the store."""

from .config import SessionConfig, default_directory
from .errors import (
    CorruptSessionError,
    EvictionError,
    SessionIOError,
    StaleSessionError,
    UndoSessionError,
)
from .filters import is_eligible
from .hooks import SessionHooks
from .paths import ensure_directory, session_file_name, session_path
from .records import SessionHeader, SessionPayload, fingerprint, from_wire, to_wire
from .store import UndoSessionStore

__all__ = [
    "CorruptSessionError",
    "EvictionError",
    "SessionConfig",
    "SessionHeader",
    "SessionHooks",
    "SessionIOError",
    "SessionPayload",
    "StaleSessionError",
    "UndoSessionError",
    "UndoSessionStore",
    "default_directory",
    "ensure_directory",
    "fingerprint",
    "from_wire",
    "is_eligible",
    "session_file_name",
    "session_path",
    "to_wire",
]
