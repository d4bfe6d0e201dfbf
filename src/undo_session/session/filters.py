"""Decide whether a buffer's undo history should be persisted."""

from __future__ import annotations

import os
import re
import tempfile
from typing import Any

from .config import SessionConfig

ENCRYPTED_FILE_PATTERN = re.compile(r"\.gpg(~|\.~[0-9]+~)?\Z")


def _under_temp_dir(file_name: str) -> bool:
    temp_dir = os.path.realpath(tempfile.gettempdir())
    path = os.path.realpath(file_name)
    try:
        return os.path.commonpath([temp_dir, path]) == temp_dir
    except ValueError:  # different drives
        return False


def _matches_rule(rule: Any, buffer: Any) -> bool:
    if callable(rule):
        return bool(rule(buffer))
    return re.search(rule, buffer.file_name) is not None


def is_eligible(buffer: Any, config: SessionConfig) -> bool:
    file_name = getattr(buffer, "file_name", None)
    if not file_name:
        return False
    if config.ignore_encrypted and ENCRYPTED_FILE_PATTERN.search(file_name):
        return False
    if config.ignore_temp_files and _under_temp_dir(file_name):
        return False
    if buffer.major_mode in config.incompatible_modes:
        return False
    return not any(_matches_rule(rule, buffer) for rule in config.incompatible_files)
