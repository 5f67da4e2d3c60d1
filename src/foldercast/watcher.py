"""Continuous mode: regenerate feeds on file changes and on a timer.

Both trigger sources go through one :class:`PassGate`. A trigger that
arrives while a pass is running is dropped, not queued; the running pass
will already see the change or the next trigger will.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import FEED_FILENAME, METADATA_FILENAME, URL_LIST_FILENAME, Config
from .generator import generate_all
from .store import QUARANTINE_SUFFIX

# Files written by a pass itself. Changes to them never trigger a pass.
_GENERATED_NAMES = {FEED_FILENAME, METADATA_FILENAME, URL_LIST_FILENAME}


class PassGate:
    """Single-slot gate that lets at most one pass run at a time."""

    def __init__(self, run_pass: Callable[[], object], logger: logging.Logger) -> None:
        self._run_pass = run_pass
        self._logger = logger
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def request(self, reason: str) -> bool:
        """Start a pass in a background thread unless one is already running."""
        if not self._lock.acquire(blocking=False):
            self._logger.debug("Pass already running; ignoring trigger: %s", reason)
            return False
        thread = threading.Thread(
            target=self._run, args=(reason,), name="foldercast-pass", daemon=True
        )
        thread.start()
        return True

    def run_now(self, reason: str) -> bool:
        """Run a pass in the calling thread unless one is already running."""
        if not self._lock.acquire(blocking=False):
            self._logger.debug("Pass already running; ignoring trigger: %s", reason)
            return False
        self._run(reason)
        return True

    def _run(self, reason: str) -> None:
        try:
            self._logger.info("Generating feeds (%s)", reason)
            self._run_pass()
        except Exception as exc:  # noqa: BLE001 - keep watching after a failed pass
            self._logger.exception("Feed generation failed: %s", exc)
        finally:
            self._lock.release()


def is_generated_path(path: str) -> bool:
    name = Path(path).name
    return (
        name in _GENERATED_NAMES
        or name.endswith(QUARANTINE_SUFFIX)
        or ".tmp-" in name
    )


class RootChangeHandler(FileSystemEventHandler):
    """Requests a pass for any change under the root except our own output."""

    def __init__(self, gate: PassGate, logger: logging.Logger) -> None:
        super().__init__()
        self._gate = gate
        self._logger = logger

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return
        # A folder's mtime changes whenever a pass replaces a file in it.
        if event.is_directory and event.event_type == "modified":
            return
        paths = [event.src_path, getattr(event, "dest_path", "") or ""]
        paths = [str(p) for p in paths if p]
        if paths and all(is_generated_path(p) for p in paths):
            return
        self._gate.request(f"{event.event_type}: {paths[0] if paths else '?'}")


class FeedWatcher:
    """Runs an initial pass, then watches the root and re-runs on a timer."""

    def __init__(
        self,
        config: Config,
        logger: logging.Logger,
        refresh: bool = False,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self._config = config
        self._logger = logger
        self._refresh = refresh
        self._observer_factory = observer_factory
        self._observer = None
        self._stop = threading.Event()
        self.gate = PassGate(self._run_pass, logger)

    def _run_pass(self) -> None:
        refresh, self._refresh = self._refresh, False
        generate_all(self._config, self._logger, refresh=refresh)

    def start(self) -> None:
        self.gate.run_now("initial run")
        observer = self._observer_factory()
        observer.schedule(  # type: ignore[attr-defined]
            RootChangeHandler(self.gate, self._logger),
            str(self._config.root_dir),
            recursive=True,
        )
        observer.start()  # type: ignore[attr-defined]
        self._observer = observer
        self._logger.info(
            "Watching %s for changes (interval pass every %.1f hour(s))",
            self._config.root_dir,
            self._config.interval_hours,
        )

    def run_forever(self) -> None:
        interval = self._config.interval_hours * 3600
        try:
            while not self._stop.wait(interval):
                self.gate.request("interval")
        finally:
            self.stop()

    def stop(self) -> None:
        self._stop.set()
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()  # type: ignore[attr-defined]
            observer.join(timeout=5)  # type: ignore[attr-defined]


def watch(config: Config, logger: logging.Logger, refresh: bool = False) -> int:
    watcher = FeedWatcher(config, logger, refresh=refresh)
    watcher.start()
    try:
        watcher.run_forever()
    except KeyboardInterrupt:
        logger.info("Stopping watcher")
    return 0
