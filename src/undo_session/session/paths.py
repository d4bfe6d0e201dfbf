"""Session file naming and directory setup."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from urllib.parse import quote

from .config import SessionConfig

MAX_NAME_BYTES = 255


def session_file_name(source: str | os.PathLike[str], extension: str) -> str:
    """Percent-encode the absolute source path into a flat file name."""

    encoded = quote(os.path.abspath(os.fspath(source)), safe="")
    name = encoded + extension
    if len(name.encode("utf-8")) <= MAX_NAME_BYTES:
        return name
    digest = hashlib.sha1(encoded.encode("utf-8")).hexdigest()
    keep = MAX_NAME_BYTES - len(digest) - len(extension) - 1
    return f"{encoded[:keep]}~{digest}{extension}"


def session_path(source: str | os.PathLike[str], config: SessionConfig) -> Path:
    return config.directory / session_file_name(source, config.extension)


def ensure_directory(config: SessionConfig) -> Path:
    config.directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    return config.directory
