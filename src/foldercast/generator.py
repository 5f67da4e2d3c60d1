"""Feed generation across the content root.

Each top-level folder under the root is one podcast channel. A pass walks
the folders in order, regenerates each channel's ``feed.xml`` and
``metadata.json``, and writes the list of feed URLs ordered by priority.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .audio import AUDIO_EXTS, IMAGE_EXTS, is_audio_name, probe_duration_ms
from .config import (
    DESCRIPTION_FILENAME,
    DETAILS_FILENAME,
    FEED_FILENAME,
    ITEMS_DIRNAME,
    METADATA_FILENAME,
    URL_LIST_FILENAME,
    Config,
)
from .feed import build_feed
from .metadata import ChannelMetadata, RootDefaults
from .progress import ProgressReporter
from .reconciler import reconcile_episodes
from .store import QUARANTINE_SUFFIX, load_or_init, read_sidecar, save_if_changed
from .urls import resolve_url
from .utils import parse_bool, read_text_or_none
from .writer import write_if_changed

PRIORITY_SEPARATOR = "-"

# Files the refresh pass removes from channel folders.
_REFRESH_ARTIFACTS = {METADATA_FILENAME, FEED_FILENAME}
# Files the refresh pass expects to find and leaves alone.
_KNOWN_CONTENT = {DESCRIPTION_FILENAME, DETAILS_FILENAME}


class FeedError(Exception):
    """Raised when a whole generation pass cannot proceed."""


@dataclass(frozen=True)
class FolderFeed:
    folder: str
    feed_url: str
    priority: int


def split_priority(folder_name: str, priorities: tuple[str, ...]) -> tuple[str | None, str]:
    """Match the folder's first ``-`` segment against *priorities*.

    Returns the matched prefix (or None) and the folder name with the prefix
    removed, which is used as the default channel title.

    >>> split_priority("Kids-Bedtime Stories", ("Talks", "Kids"))
    ('Kids', 'Bedtime Stories')
    >>> split_priority("Sermons", ("Talks", "Kids"))
    (None, 'Sermons')
    """
    head, sep, rest = folder_name.partition(PRIORITY_SEPARATOR)
    prefix = head.strip()
    if sep and prefix in priorities:
        return prefix, rest.strip() or folder_name
    return None, folder_name


def priority_rank(prefix: str | None, priorities: tuple[str, ...]) -> int:
    """Bucket index: 0 for the first configured prefix, unmatched last."""
    if prefix is None or prefix not in priorities:
        return len(priorities)
    return priorities.index(prefix)


def order_feed_urls(feeds: list[FolderFeed]) -> list[str]:
    """Concatenate priority buckets, highest first, keeping folder order inside."""
    buckets: dict[int, list[str]] = {}
    for feed in feeds:
        buckets.setdefault(feed.priority, []).append(feed.feed_url)
    return [url for rank in sorted(buckets) for url in buckets[rank]]


def folder_feed(config: Config, defaults: RootDefaults, name: str) -> FolderFeed:
    """Public feed URL and priority bucket of the channel folder *name*."""
    prefix, _ = split_priority(name, defaults.priorities)
    return FolderFeed(
        folder=name,
        feed_url=resolve_url(
            config.share_url, f"{name}/{FEED_FILENAME}", encode=config.encode_urls
        ),
        priority=priority_rank(prefix, defaults.priorities),
    )


def load_root_defaults(config: Config, logger: logging.Logger | None = None) -> RootDefaults:
    defaults = RootDefaults(website_url=config.site_url)
    data = load_or_init(config.root_metadata_path, defaults.to_dict(), logger)
    loaded = RootDefaults.from_dict(data)
    if not loaded.website_url:
        loaded = RootDefaults(
            cover_url=loaded.cover_url,
            website_url=config.site_url,
            categories=loaded.categories,
            priorities=loaded.priorities,
        )
    return loaded


def list_channel_folders(root_dir: Path) -> list[Path]:
    try:
        entries = list(root_dir.iterdir())
    except OSError as exc:
        raise FeedError(f"Cannot read root directory {root_dir}: {exc}") from exc
    return sorted(
        (path for path in entries if path.is_dir() and not path.name.startswith(".")),
        key=lambda path: path.name,
    )


def generate_all(
    config: Config,
    logger: logging.Logger,
    refresh: bool = False,
) -> list[str]:
    """Run one full pass and return the ordered feed URLs."""
    if not config.root_dir.is_dir():
        raise FeedError(f"Root directory not found: {config.root_dir}")
    defaults = load_root_defaults(config, logger)
    folders = list_channel_folders(config.root_dir)
    if refresh:
        removed = refresh_artifacts(folders, logger, recursive=config.refresh_recursive)
        logger.info("Refresh removed %d generated file(s)", removed)

    feeds: list[FolderFeed] = []
    failed: list[str] = []
    with ProgressReporter(len(folders), logger) as progress:
        for folder in folders:
            try:
                feeds.append(generate_folder(config, defaults, folder, logger))
            except Exception as exc:  # noqa: BLE001 - one folder must not stop the pass
                logger.exception("Failed to generate feed for %s: %s", folder.name, exc)
                failed.append(folder.name)
                progress.fail(folder.name)
                if (folder / FEED_FILENAME).exists():
                    # Keep listing the feed left from the last good pass.
                    feeds.append(folder_feed(config, defaults, folder.name))
                continue
            progress.complete(folder.name)

    urls = order_feed_urls(feeds)
    write_if_changed(
        config.url_list_path, "\n".join(urls) + "\n" if urls else "", logger
    )
    if failed:
        logger.warning(
            "Generated %d feed(s); %d folder(s) failed: %s",
            len(folders) - len(failed),
            len(failed),
            ", ".join(failed),
        )
    else:
        logger.info("All %d RSS feed(s) generated successfully", len(feeds))
    return urls


def generate_folder(
    config: Config,
    defaults: RootDefaults,
    folder: Path,
    logger: logging.Logger,
) -> FolderFeed:
    """Regenerate one channel's metadata sidecar and feed."""
    name = folder.name
    prefix, title = split_priority(name, defaults.priorities)
    categories = list(defaults.categories)
    if prefix and prefix not in categories:
        categories.append(prefix)

    def url_for(relative: str) -> str:
        return resolve_url(config.share_url, relative, encode=config.encode_urls)

    cover_url = _prepare_cover(folder, logger)
    cover_url = url_for(f"{name}/{cover_url}") if cover_url else defaults.cover_url

    initial = ChannelMetadata(
        title=title,
        description=title,
        site_url=defaults.website_url,
        categories=categories,
    )
    metadata_path = folder / METADATA_FILENAME
    channel = ChannelMetadata.from_dict(
        load_or_init(metadata_path, initial.to_dict(), logger)
    )
    _apply_description_sidecars(folder, channel, logger)
    if not channel.site_url:
        channel.site_url = defaults.website_url

    items_dir = folder / ITEMS_DIRNAME
    _move_audio_into_items(folder, items_dir, logger)
    filenames = [
        path.name for path in items_dir.iterdir() if path.is_file() and is_audio_name(path.name)
    ]

    result = reconcile_episodes(
        filenames,
        channel.items,
        items_dir=items_dir,
        reference_date=channel.date,
        hide_date=channel.hide_date,
        rename_dated=config.normalize_names,
        probe=probe_duration_ms,
        logger=logger,
    )

    feed = folder_feed(config, defaults, name)
    xml = build_feed(
        channel,
        result.episodes,
        feed_url=feed.feed_url,
        cover_url=cover_url,
        item_url=lambda filename: url_for(f"{name}/{ITEMS_DIRNAME}/{filename}"),
        logger=logger,
    )

    channel.items = result.item_metadata
    save_if_changed(metadata_path, channel.to_dict(), logger)
    write_if_changed(folder / FEED_FILENAME, xml, logger)
    logger.info(
        "Generated RSS feed for %s (%d episode(s)%s)",
        name,
        len(result.episodes),
        f", {len(result.skipped)} skipped" if result.skipped else "",
    )
    return feed


def _prepare_cover(folder: Path, logger: logging.Logger) -> str | None:
    """Return the cover image filename, renaming the first image to cover.*."""
    images = sorted(
        path.name
        for path in folder.iterdir()
        if path.is_file() and path.suffix.lower() in IMAGE_EXTS
    )
    for existing in ("cover.jpg", "cover.png"):
        if existing in images:
            return existing
    if not images:
        return None
    source = images[0]
    target = "cover" + Path(source).suffix.lower()
    try:
        (folder / source).rename(folder / target)
    except OSError as exc:
        logger.warning("Could not rename cover %s in %s: %s", source, folder.name, exc)
        return source
    logger.info("Renamed cover image %s -> %s in %s", source, target, folder.name)
    return target


def _apply_description_sidecars(
    folder: Path, channel: ChannelMetadata, logger: logging.Logger
) -> None:
    details = read_sidecar(folder / DETAILS_FILENAME, logger) or {}
    description = details.get("description")
    if not description:
        description = (read_text_or_none(folder / DESCRIPTION_FILENAME) or "").strip()
    if description:
        channel.description = str(description)
    if "hideDate" in details:
        channel.hide_date = bool(parse_bool(details["hideDate"]))


def _move_audio_into_items(folder: Path, items_dir: Path, logger: logging.Logger) -> None:
    items_dir.mkdir(exist_ok=True)
    for path in sorted(folder.iterdir()):
        if path.is_file() and is_audio_name(path.name):
            target = items_dir / path.name
            shutil.move(str(path), str(target))
            logger.info("Moved %s into %s/%s", path.name, folder.name, ITEMS_DIRNAME)


def refresh_artifacts(
    folders: list[Path], logger: logging.Logger, recursive: bool = False
) -> int:
    """Delete generated sidecars and feeds so every identity is rebuilt.

    Only known generated files are removed. Anything unrecognised is
    reported and left in place.
    """
    removed = 0
    for folder in folders:
        paths = folder.rglob("*") if recursive else folder.iterdir()
        for path in sorted(paths):
            if not path.is_file():
                continue
            if _is_refresh_artifact(path.name):
                path.unlink()
                removed += 1
                logger.info("Removed %s", path)
            elif not _is_known_content(path):
                logger.warning("Unexpected file left in place during refresh: %s", path)
    return removed


def _is_refresh_artifact(name: str) -> bool:
    return name in _REFRESH_ARTIFACTS or name.endswith(QUARANTINE_SUFFIX)


def _is_known_content(path: Path) -> bool:
    suffix = path.suffix.lower()
    return (
        path.name in _KNOWN_CONTENT
        or suffix in AUDIO_EXTS
        or suffix in IMAGE_EXTS
        or path.name == URL_LIST_FILENAME
    )
