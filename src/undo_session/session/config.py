"""Options controlling where and how undo sessions are stored."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Union

ENV_PREFIX = "UNDO_SESSION_"

IgnoreRule = Union[str, Callable[[Any], bool]]

COMPRESSION_EXTENSIONS = {
    "gz": ".gz",
    "bz2": ".bz2",
    "xz": ".xz",
}
PLAIN_EXTENSION = ".jsonl"


def default_directory() -> Path:
    data_home = os.getenv("XDG_DATA_HOME") or os.path.join("~", ".local", "share")
    return Path(data_home).expanduser() / "undo-session"


@dataclass(slots=True)
class SessionConfig:
    """Persistence settings.

    ``incompatible_files`` holds regular expressions searched in the file
    name, or predicates called with the buffer; any hit skips the buffer.
    ``file_limit`` caps the number of stored sessions, ``None`` (or a
    value below one) disables the cap.
    """

    directory: Path = field(default_factory=default_directory)
    linear: bool = False
    ignore_encrypted: bool = True
    ignore_temp_files: bool = True
    compression: bool = True
    compression_format: str = "gz"
    incompatible_files: Tuple[IgnoreRule, ...] = ()
    incompatible_modes: Tuple[str, ...] = ()
    file_limit: Optional[int] = None

    def __post_init__(self) -> None:
        self.directory = Path(self.directory).expanduser()
        if self.compression_format not in COMPRESSION_EXTENSIONS:
            raise ValueError(
                f"Unknown compression format '{self.compression_format}', "
                f"expected one of {sorted(COMPRESSION_EXTENSIONS)}"
            )
        if self.file_limit is not None and (
            isinstance(self.file_limit, bool) or not isinstance(self.file_limit, int)
        ):
            raise ValueError(f"file_limit must be an integer, got {self.file_limit!r}")
        self.incompatible_files = tuple(self.incompatible_files)
        for rule in self.incompatible_files:
            if callable(rule):
                continue
            try:
                re.compile(rule)
            except (re.error, TypeError) as exc:
                raise ValueError(f"Invalid ignore rule {rule!r}: {exc}") from exc
        self.incompatible_modes = tuple(self.incompatible_modes)

    @property
    def active_compression(self) -> Optional[str]:
        return self.compression_format if self.compression else None

    @property
    def extension(self) -> str:
        return extension_for(self.active_compression)

    @property
    def limit_enabled(self) -> bool:
        return self.file_limit is not None and self.file_limit > 0

    def with_overrides(self, **changes: Any) -> "SessionConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, **overrides: Any) -> "SessionConfig":
        """Build a config from ``UNDO_SESSION_*`` variables, then ``overrides``."""

        values: dict[str, Any] = {}
        directory = _env("DIR")
        if directory:
            values["directory"] = Path(directory)
        for name, key in (
            ("LINEAR", "linear"),
            ("IGNORE_ENCRYPTED", "ignore_encrypted"),
            ("IGNORE_TEMP_FILES", "ignore_temp_files"),
            ("COMPRESSION", "compression"),
        ):
            flag = _env_flag(name)
            if flag is not None:
                values[key] = flag
        compression_format = _env("COMPRESSION_FORMAT")
        if compression_format:
            values["compression_format"] = compression_format.lower()
        modes = _env("IGNORE_MODES")
        if modes:
            values["incompatible_modes"] = tuple(
                mode.strip() for mode in modes.split(",") if mode.strip()
            )
        limit = _env("FILE_LIMIT")
        if limit:
            try:
                values["file_limit"] = int(limit)
            except ValueError as exc:
                raise ValueError(f"{ENV_PREFIX}FILE_LIMIT is not an integer: {limit!r}") from exc
        values.update(overrides)
        return cls(**values)


def extension_for(compression: Optional[str]) -> str:
    if compression is None:
        return PLAIN_EXTENSION
    return PLAIN_EXTENSION + COMPRESSION_EXTENSIONS[compression]


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str) -> Optional[bool]:
    raw = _env(name)
    if raw is None:
        return None
    return raw.lower() in {"1", "true", "yes", "on"}


__all__ = [
    "COMPRESSION_EXTENSIONS",
    "IgnoreRule",
    "PLAIN_EXTENSION",
    "SessionConfig",
    "default_directory",
    "extension_for",
]
