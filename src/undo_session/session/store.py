"""Save and restore buffer undo histories as session files.

Every public operation is best-effort: failures are reported through
telemetry and turn into a neutral return value, so editing never stops
because persistence could not keep up.
"""

from __future__ import annotations

import os
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from undo_session.buffer.undo import UNDO_DISABLED, Cons, is_empty_history
from undo_session.history.codec import decode_history, encode_history
from undo_session.history.equivalence import (
    EQUIVALENCE,
    EquivalenceTable,
    decode_index,
    encode_index,
)
from undo_session.history.linear import linearize
from undo_session.runtime.telemetry import record_event, span

from .config import COMPRESSION_EXTENSIONS, PLAIN_EXTENSION, SessionConfig, extension_for
from .errors import (
    CorruptSessionError,
    EvictionError,
    SessionIOError,
    StaleSessionError,
    UndoSessionError,
)
from .filters import is_eligible
from .paths import ensure_directory, session_path
from .records import SessionHeader, SessionPayload, fingerprint
from .storage import open_stream, read_header, read_payload, write_session

T = TypeVar("T")

_UNKNOWN = object()


def _guarded(operation: str, fallback: T) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Run a store operation inside a span and log any failure it raises."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self: "UndoSessionStore", *args: Any, **kwargs: Any) -> T:
            metadata = {}
            if args and hasattr(args[0], "name"):
                metadata["buffer"] = args[0].name
            with span(f"session::{operation}", component="session", metadata=metadata) as handle:
                try:
                    return func(self, *args, **kwargs)
                except UndoSessionError as exc:
                    failure: UndoSessionError = exc
                except OSError as exc:
                    failure = SessionIOError(str(exc), path=_path_of(exc))
                except Exception as exc:
                    # User rules and predicates run in here too.
                    failure = UndoSessionError(f"{type(exc).__name__}: {exc}")
                handle.add_metadata("failure", failure.kind)
            record_event(
                f"session.{operation}.{failure.kind}",
                level=failure.level,
                data={"reason": str(failure), "path": failure.path or ""},
            )
            return fallback

        return wrapper

    return decorator


def _path_of(exc: OSError) -> Optional[Path]:
    return Path(exc.filename) if exc.filename else None


def _compression_of(name: str) -> Any:
    for compression, suffix in COMPRESSION_EXTENSIONS.items():
        if name.endswith(PLAIN_EXTENSION + suffix):
            return compression
    if name.endswith(PLAIN_EXTENSION):
        return None
    return _UNKNOWN


class UndoSessionStore:
    """Persists undo state per visited file under ``config.directory``."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        *,
        equivalence: Optional[EquivalenceTable] = None,
    ) -> None:
        self.config = config or SessionConfig.from_env()
        self.equivalence = EQUIVALENCE if equivalence is None else equivalence

    def session_path(self, buffer: Any) -> Path:
        return session_path(buffer.file_name, self.config)

    @_guarded("save", False)
    def save(self, buffer: Any) -> bool:
        if not is_eligible(buffer, self.config):
            return False
        if buffer.undo_list is UNDO_DISABLED or is_empty_history(buffer.undo_list):
            return False

        header = SessionHeader.for_text(buffer.text)
        payload = self._encode_payload(buffer)
        path = self.session_path(buffer)
        try:
            ensure_directory(self.config)
        except OSError as exc:
            raise SessionIOError(
                f"Could not create session directory: {exc}", path=self.config.directory
            ) from exc
        if not path.exists():
            # Only a new file can push the directory past the limit.
            self.evict(reserve=1)
        write_session(path, header, payload, compression=self.config.active_compression)
        record_event("session.saved", level="debug", data={"path": path})
        return True

    def _encode_payload(self, buffer: Any) -> SessionPayload:
        if self.config.linear:
            flat = linearize(buffer.undo_list, self.equivalence)
            return SessionPayload(primary=encode_history(flat), pending=None)
        return SessionPayload(
            primary=encode_history(buffer.undo_list),
            pending=encode_history(buffer.pending_undo_list),
            equivalence_index=tuple(
                encode_index(self.equivalence, buffer.undo_list, buffer.pending_undo_list)
            ),
        )

    @_guarded("load", False)
    def load(self, buffer: Any) -> bool:
        if not is_eligible(buffer, self.config):
            return False
        path = self.session_path(buffer)
        if not path.is_file():
            return False

        try:
            with open_stream(path, "r", self.config.active_compression) as stream:
                self._check_header(read_header(stream, path), buffer, path)
                payload = read_payload(stream, path)
        except OSError as exc:
            raise SessionIOError(f"Could not read session: {exc}", path=path) from exc

        primary = decode_history(payload.primary)
        if primary is UNDO_DISABLED:
            primary = None
        pending = decode_history(payload.pending)
        if pending is UNDO_DISABLED:
            pending = None
        for name, history in (("primary", primary), ("pending", pending)):
            if history is not None and not isinstance(history, Cons):
                raise CorruptSessionError(f"Stored {name} history is not a list", path=path)
        links = decode_index(payload.equivalence_index, primary, pending)

        buffer.undo_list = primary
        buffer.pending_undo_list = pending
        self.equivalence.merge(links)
        record_event(
            "session.loaded", level="debug", data={"path": path, "links": len(links)}
        )
        return True

    @staticmethod
    def _check_header(header: SessionHeader, buffer: Any, path: Path) -> None:
        text = buffer.text
        if header.buffer_size != len(text):
            raise StaleSessionError(
                f"Size mismatch: stored {header.buffer_size}, buffer {len(text)}",
                path=path,
            )
        if header.buffer_checksum != fingerprint(text):
            raise StaleSessionError("Checksum mismatch", path=path)

    @_guarded("evict", 0)
    def evict(self, *, reserve: int = 0) -> int:
        """Delete the oldest session files beyond ``file_limit - reserve``."""

        if not self.config.limit_enabled:
            return 0
        keep = max(self.config.file_limit - reserve, 0)
        try:
            with os.scandir(self.config.directory) as entries:
                files = [
                    (entry.stat().st_mtime_ns, Path(entry.path))
                    for entry in entries
                    if entry.is_file(follow_symlinks=False)
                ]
        except OSError as exc:
            raise EvictionError(
                f"Could not scan session directory: {exc}", path=self.config.directory
            ) from exc

        files.sort(key=lambda item: item[0], reverse=True)
        removed = 0
        for _, stale in files[keep:]:
            try:
                stale.unlink()
            except OSError as exc:
                record_event(
                    "session.evict.skipped",
                    level="warning",
                    data={"path": stale, "reason": str(exc)},
                )
                continue
            removed += 1
        return removed

    @_guarded("recompress", 0)
    def recompress(self) -> int:
        """Rewrite sessions stored under another compression setting."""

        target = self.config.active_compression
        directory = self.config.directory
        if not directory.is_dir():
            return 0
        try:
            candidates = sorted(directory.iterdir())
        except OSError as exc:
            raise SessionIOError(f"Could not scan session directory: {exc}", path=directory) from exc

        converted = 0
        for path in candidates:
            source = _compression_of(path.name)
            if source is _UNKNOWN or source == target or not path.is_file():
                continue
            stem = path.name[: -len(extension_for(source))]
            destination = path.with_name(stem + extension_for(target))
            try:
                with open_stream(path, "r", source) as stream:
                    header = read_header(stream, path)
                    payload = read_payload(stream, path)
                write_session(destination, header, payload, compression=target)
                path.unlink()
            except (UndoSessionError, OSError) as exc:
                record_event(
                    "session.recompress.skipped",
                    level="warning",
                    data={"path": path, "reason": str(exc)},
                )
                continue
            converted += 1
        return converted


__all__ = ["UndoSessionStore"]
