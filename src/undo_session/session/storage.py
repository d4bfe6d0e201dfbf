"""Reading and writing session files, optionally compressed."""

from __future__ import annotations

import bz2
import gzip
import json
import lzma
import os
import zlib
from contextlib import suppress
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO

from .errors import CorruptSessionError, SessionIOError
from .records import SessionHeader, SessionPayload

_OPENERS: Dict[Optional[str], Callable[..., TextIO]] = {
    None: open,
    "gz": gzip.open,
    "bz2": bz2.open,
    "xz": lzma.open,
}

# Raised by json and the decompressors on damaged input.
DECODE_ERRORS = (ValueError, EOFError, gzip.BadGzipFile, lzma.LZMAError, zlib.error)


def open_stream(path: Path, mode: str, compression: Optional[str]) -> TextIO:
    return _OPENERS[compression](path, f"{mode}t", encoding="utf-8")


def write_session(
    path: Path,
    header: SessionHeader,
    payload: SessionPayload,
    *,
    compression: Optional[str],
) -> None:
    """Replace ``path`` with a freshly written header + payload pair."""

    header_line = json.dumps(header.to_json())
    payload_line = json.dumps(payload.to_json(), separators=(",", ":"))
    scratch = path.with_name(path.name + ".tmp")
    try:
        with open_stream(scratch, "w", compression) as stream:
            stream.write(header_line + "\n")
            stream.write(payload_line + "\n")
        os.replace(scratch, path)
    except OSError as exc:
        with suppress(OSError):
            scratch.unlink()
        raise SessionIOError(f"Could not write session: {exc}", path=path) from exc


def _read_document(stream: TextIO, what: str, path: Path) -> object:
    try:
        line = stream.readline()
    except DECODE_ERRORS as exc:
        raise CorruptSessionError(f"Damaged session {what}: {exc}", path=path) from exc
    except OSError as exc:
        raise SessionIOError(f"Could not read session {what}: {exc}", path=path) from exc
    if not line.strip():
        raise CorruptSessionError(f"Session {what} is missing", path=path)
    try:
        return json.loads(line)
    except ValueError as exc:
        raise CorruptSessionError(f"Session {what} is not valid JSON: {exc}", path=path) from exc
    except RecursionError as exc:
        raise CorruptSessionError(f"Session {what} is nested too deeply", path=path) from exc


def read_header(stream: TextIO, path: Path) -> SessionHeader:
    return SessionHeader.from_json(_read_document(stream, "header", path))


def read_payload(stream: TextIO, path: Path) -> SessionPayload:
    document = _read_document(stream, "payload", path)
    try:
        return SessionPayload.from_json(document)
    except RecursionError as exc:
        raise CorruptSessionError("Session payload is nested too deeply", path=path) from exc


__all__ = [
    "DECODE_ERRORS",
    "open_stream",
    "read_header",
    "read_payload",
    "write_session",
]
