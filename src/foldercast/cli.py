"""Command-line interface for foldercast."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ConfigError, build_config
from .generator import FeedError, generate_all
from .writer import IGNORED_LINE_MARKERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate podcast RSS feeds from a directory of audio folders"
    )
    parser.add_argument(
        "--root",
        help="Content root; each top-level folder becomes a feed (env: MAIN_DIRECTORY)",
    )
    parser.add_argument(
        "--share-url",
        help="Public URL that the content root is served under (env: ROOT_SHARE_URL)",
    )
    parser.add_argument(
        "--site-url",
        help="Default website link for channels (env: DEFAULT_SITE_URL)",
    )
    parser.add_argument(
        "--log-dir", help="Log directory (default: ~/.local/state/foldercast)"
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and regenerate feeds when files under the root change",
    )
    parser.add_argument(
        "--interval-hours",
        type=float,
        help="In --watch mode, also regenerate every N hours (default: 4)",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help=(
            "Delete generated metadata.json and feed.xml files before running so "
            "GUIDs, dates and descriptions are regenerated from scratch."
        ),
    )
    parser.add_argument(
        "--refresh-recursive",
        action="store_true",
        help="With --refresh, also clean subfolders of each channel folder",
    )
    parser.add_argument(
        "--normalize-names",
        action="store_true",
        help="Rename new episodes with a date in their name to 'YYYY.MM.DD - Title'",
    )
    parser.add_argument(
        "--no-url-encoding",
        action="store_true",
        help="Do not percent-encode path segments in generated URLs",
    )
    return parser


def configure_logging(log_dir: Path) -> logging.Logger:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "foldercast.log"
    logger = logging.getLogger("foldercast")
    logger.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    # While a pass runs, ProgressReporter swaps this handler for a
    # RichHandler on the progress bar's console.
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler.set_name("stream")
    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    return logger


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(
            {
                "root_dir": args.root,
                "share_url": args.share_url,
                "site_url": args.site_url,
                "log_dir": args.log_dir,
                "interval_hours": args.interval_hours,
                "normalize_names": args.normalize_names or None,
                "refresh_recursive": args.refresh_recursive or None,
                "encode_urls": False if args.no_url_encoding else None,
            }
        )
    except ConfigError as exc:
        parser.error(str(exc))
    logger = configure_logging(config.log_dir)

    try:
        if args.watch:
            from .watcher import watch

            logger.info(
                "Watching %s; ignoring changes in lines including: %s",
                config.root_dir,
                ", ".join(IGNORED_LINE_MARKERS),
            )
            return watch(config, logger, refresh=args.refresh)
        urls = generate_all(config, logger, refresh=args.refresh)
        logger.info("Wrote %d feed URL(s) to %s", len(urls), config.url_list_path)
    except FeedError as exc:
        logger.error("Error: %s", exc)
        return 1
    except Exception as exc:  # noqa: BLE001 - CLI boundary
        logger.exception("Unhandled error: %s", exc)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
