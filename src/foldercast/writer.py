"""Write generated files only when their content really changed.

Feed XML carries a ``<lastBuildDate>`` that moves on every run. Rewriting a
feed for that alone would make sync clients and feed readers see a change
every time, so lines containing an ignored marker on both sides of a change
do not count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .utils import atomic_write_text, read_text_or_none

IGNORED_LINE_MARKERS = ("<lastBuildDate>",)

# How far ahead to look for a matching line before pairing two lines as a
# modification.
DIFF_WINDOW = 8


@dataclass(frozen=True)
class LineChange:
    old: str
    new: str

    def is_ignored(self, markers: Iterable[str]) -> bool:
        return any(marker in self.old and marker in self.new for marker in markers)


def changed_lines(old: str, new: str, window: int = DIFF_WINDOW) -> list[LineChange]:
    """Align *old* and *new* line by line and return the differing pairs.

    Inserted lines are reported with an empty ``old`` and removed lines with
    an empty ``new``. Lines that differ with no match within *window* lines
    are reported as one modified pair.
    """
    old_lines = old.splitlines()
    new_lines = new.splitlines()
    changes: list[LineChange] = []
    i = j = 0
    while i < len(old_lines) and j < len(new_lines):
        if old_lines[i] == new_lines[j]:
            i += 1
            j += 1
            continue
        step = _resync(old_lines, new_lines, i, j, window)
        if step is None:
            changes.append(LineChange(old_lines[i], new_lines[j]))
            i += 1
            j += 1
        elif step[0]:
            changes.extend(LineChange(line, "") for line in old_lines[i : i + step[0]])
            i += step[0]
        else:
            changes.extend(LineChange("", line) for line in new_lines[j : j + step[1]])
            j += step[1]
    changes.extend(LineChange(line, "") for line in old_lines[i:])
    changes.extend(LineChange("", line) for line in new_lines[j:])
    return changes


def _resync(
    old_lines: list[str], new_lines: list[str], i: int, j: int, window: int
) -> tuple[int, int] | None:
    """Return (removed, inserted) line counts that bring i and j back in step."""
    for offset in range(1, window + 1):
        if i + offset < len(old_lines) and old_lines[i + offset] == new_lines[j]:
            return offset, 0
        if j + offset < len(new_lines) and new_lines[j + offset] == old_lines[i]:
            return 0, offset
    return None


def write_if_changed(
    path: Path,
    content: str,
    logger: logging.Logger | None = None,
    ignore: Iterable[str] = IGNORED_LINE_MARKERS,
) -> bool:
    """Write *content* to *path* unless nothing meaningful changed.

    Returns True when the file was written.
    """
    current = read_text_or_none(path)
    if current == content:
        return False
    markers = tuple(ignore)
    if current is not None:
        changes = changed_lines(current, content)
        if all(change.is_ignored(markers) for change in changes):
            return False
        if logger:
            logger.info("Writing file: %s (%d changed line(s))", path, len(changes))
            for change in changes:
                if change.old:
                    logger.info("  - %s", change.old.strip())
                if change.new:
                    logger.info("  + %s", change.new.strip())
    elif logger:
        logger.info("Creating file: %s", path)
    atomic_write_text(path, content)
    return True
