"""Merge the current episode listing with previously stored metadata.

Identity is keyed by filename. An episode seen on an earlier run keeps its
GUID, title, description, date and cached duration; only fields that were
never stored are filled in. New episodes get a date from their filename or
a synthetic date that keeps feed order equal to filename order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from .audio import AudioProbeError, probe_duration_ms
from .dates import ExtractedDate, allocate_date, extract_date
from .metadata import EpisodeMetadata, new_guid
from .utils import parse_bool, safe_int

_DIGITS_RE = re.compile(r"\d+")
_SORT_PAD = 12


@dataclass(frozen=True)
class Episode:
    filename: str
    position: int  # 1-based
    size: int
    metadata: EpisodeMetadata


@dataclass
class ReconcileResult:
    episodes: list[Episode] = field(default_factory=list)
    item_metadata: dict[str, dict[str, Any]] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    renamed: dict[str, str] = field(default_factory=dict)


def episode_sort_key(name: str) -> tuple[str, str]:
    """Sort key that orders embedded numbers numerically.

    Every run of digits is zero-padded before a plain string comparison,
    which gives a total order for any names, with or without digits.

    >>> sorted(["Ep 10.mp3", "Ep 9.mp3", "Bonus.mp3"], key=episode_sort_key)
    ['Bonus.mp3', 'Ep 9.mp3', 'Ep 10.mp3']
    """
    padded = _DIGITS_RE.sub(lambda m: m.group(0).zfill(_SORT_PAD), name)
    return padded.casefold(), name


def sort_episode_names(names: Iterable[str]) -> list[str]:
    return sorted(names, key=episode_sort_key)


def normalized_name(extracted: ExtractedDate, suffix: str) -> str:
    """``2023.05.14 - Title.mp3`` form used when dated files are renamed."""
    return f"{extracted.date:%Y.%m.%d} - {extracted.title}{suffix}"


def reconcile_episodes(
    filenames: Iterable[str],
    previous: dict[str, dict[str, Any]],
    *,
    items_dir: Path,
    reference_date: str,
    hide_date: bool = False,
    rename_dated: bool = False,
    probe: Callable[[Path], int] = probe_duration_ms,
    logger: logging.Logger | None = None,
) -> ReconcileResult:
    """Build the ordered episode list and the metadata map to persist.

    *previous* is the stored ``itemMetadata``; it is only read. The returned
    ``item_metadata`` holds entries for files present now (plus files that
    could not be probed this time, so their identity is not lost).
    """
    names = sort_episode_names(filenames)
    total = len(names)
    result = ReconcileResult()

    for index, name in enumerate(names):
        prior = previous.get(name) or {}
        position = index + 1
        extracted: ExtractedDate | None = None
        if not prior.get("title") or not prior.get("date"):
            extracted = extract_date(Path(name).stem, logger)

        if extracted and not prior and rename_dated:
            name = _rename_dated(items_dir, name, extracted, result, logger)

        title = prior.get("title") or (extracted.title if extracted else Path(name).stem)
        date = prior.get("date") or (
            extracted.iso
            if extracted
            else allocate_date(total - index, reference_date, logger)
        )

        path = items_dir / name
        try:
            size = path.stat().st_size
            duration = safe_int(prior.get("duration"))
            if duration <= 0:
                duration = probe(path)
        except (AudioProbeError, OSError) as exc:
            if logger:
                logger.warning("Skipping episode %s: %s", name, exc)
            result.skipped.append(name)
            if prior:
                result.item_metadata[name] = dict(prior)
            continue

        metadata = EpisodeMetadata(
            title=str(title),
            guid=str(prior.get("guid") or new_guid()),
            date=str(date),
            description=str(prior.get("description") or f"Episode {position}"),
            duration=duration,
            hide_date=_stored_flag(prior.get("hideDate"), hide_date),
        )
        result.item_metadata[name] = {**prior, **metadata.to_dict()}
        result.episodes.append(
            Episode(filename=name, position=position, size=size, metadata=metadata)
        )
    return result


def _rename_dated(
    items_dir: Path,
    name: str,
    extracted: ExtractedDate,
    result: ReconcileResult,
    logger: logging.Logger | None,
) -> str:
    target = normalized_name(extracted, Path(name).suffix)
    if target == name:
        return name
    source_path = items_dir / name
    target_path = items_dir / target
    if target_path.exists():
        if logger:
            logger.warning("Not renaming %s: %s already exists", name, target)
        return name
    try:
        source_path.rename(target_path)
    except OSError as exc:
        if logger:
            logger.warning("Could not rename %s to %s: %s", name, target, exc)
        return name
    if logger:
        logger.info("Renamed %s -> %s", name, target)
    result.renamed[name] = target
    return target


def _stored_flag(value: object, default: bool) -> bool:
    parsed = parse_bool(value)
    return default if parsed is None else parsed
