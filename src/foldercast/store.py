"""JSON sidecar storage with quarantine of unreadable files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .utils import atomic_write_text, read_text_or_none

QUARANTINE_SUFFIX = ".error.txt"


def quarantine_path(path: Path) -> Path:
    """Return the append-only error file for *path*.

    >>> quarantine_path(Path("/podcasts/Show/metadata.json"))
    PosixPath('/podcasts/Show/metadata.json.error.txt')
    """
    return path.with_name(path.name + QUARANTINE_SUFFIX)


def load_or_init(
    path: Path, defaults: dict[str, Any], logger: logging.Logger | None = None
) -> dict[str, Any]:
    """Load the sidecar at *path*, filling in missing keys from *defaults*.

    A missing file is created from *defaults*. Keys present in the file win
    over *defaults*; the merged value is written back when it differs. A
    file that cannot be parsed is copied into its quarantine file together
    with the error and replaced by *defaults*.
    """
    raw = read_text_or_none(path)
    if raw is None:
        save_if_changed(path, defaults, logger)
        return dict(defaults)
    try:
        stored = json.loads(raw)
        if not isinstance(stored, dict):
            raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
    except ValueError as exc:
        quarantine(path, raw, exc, logger)
        save_if_changed(path, defaults, logger)
        return dict(defaults)
    merged = {**defaults, **stored}
    save_if_changed(path, merged, logger)
    return merged


def read_sidecar(path: Path, logger: logging.Logger | None = None) -> dict[str, Any] | None:
    """Read a user-authored JSON sidecar without ever rewriting it.

    Returns None when the file is absent or unreadable; unreadable files
    are quarantined.
    """
    raw = read_text_or_none(path)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    except ValueError as exc:
        quarantine(path, raw, exc, logger)
        return None
    return data


def save_if_changed(
    path: Path, value: dict[str, Any], logger: logging.Logger | None = None
) -> bool:
    """Write *value* as JSON unless the file already holds an equal value.

    Returns True when the file was written.
    """
    current = _read_json_quiet(path)
    if current is not None and _canonical(current) == _canonical(value):
        return False
    atomic_write_text(path, json.dumps(value, ensure_ascii=False, indent=2) + "\n")
    if logger:
        logger.info("Wrote metadata: %s", path)
    return True


def quarantine(
    path: Path, raw: str, error: Exception, logger: logging.Logger | None = None
) -> Path:
    target = quarantine_path(path)
    with target.open("a", encoding="utf-8") as handle:
        handle.write(f"ERROR HAPPENED:\n\n{raw}\n{error}\n\n")
    if logger:
        logger.warning("Unreadable sidecar %s (%s); saved a copy to %s", path, error, target.name)
    return target


def _read_json_quiet(path: Path) -> Any:
    raw = read_text_or_none(path)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _canonical(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)
