"""Small filesystem and parsing helpers."""

from __future__ import annotations

import os
import time
from pathlib import Path


def atomic_write_text(path: Path, text: str) -> None:
    temp_name = f"{path.name}.tmp-{os.getpid()}-{time.time_ns()}"
    temp_path = path.with_name(temp_name)
    temp_path.write_text(text, encoding="utf-8")
    os.replace(temp_path, path)


def read_text_or_none(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return None


def safe_int(value: object, default: int = 0) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


_TRUE_WORDS = {"1", "yes", "true", "on"}
_FALSE_WORDS = {"0", "no", "false", "off"}


def parse_bool(value: object) -> bool | None:
    """Read a flag from JSON, ini or environment text.

    Returns None for values that are not a recognised yes/no word.

    >>> parse_bool("false"), parse_bool("Yes"), parse_bool(1), parse_bool("maybe")
    (False, True, True, None)
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if not isinstance(value, str):
        return None
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None
