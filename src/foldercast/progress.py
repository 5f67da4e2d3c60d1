"""Progress reporting for a feed generation pass."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressReporter:
    """Shows one overall bar (N/total folders) while a pass runs.

    Finished folders are printed as stable lines above the bar. On entry the
    logging ``StreamHandler`` named ``"stream"`` is replaced with a
    ``RichHandler`` on the same console so log lines do not interleave with
    the bar; the original handler is restored on exit.
    """

    def __init__(self, total: int, logger: logging.Logger) -> None:
        self._logger = logger
        self._completed = 0
        self.console = Console()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]Generating feeds"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TextColumn("folders"),
            TimeElapsedColumn(),
            auto_refresh=False,
            transient=False,
            console=self.console,
        )
        self._overall_task = self._progress.add_task("overall", total=total)
        self._stream_handler: logging.Handler | None = None
        self._rich_handler: logging.Handler | None = None
        self._target_logger: logging.Logger | None = None

    def _install_rich_handler(self) -> None:
        """Replace the 'stream' StreamHandler with a RichHandler."""
        candidate: logging.Logger | None = self._logger
        while candidate is not None:
            for handler in candidate.handlers:
                if handler.get_name() == "stream":
                    rich_handler = RichHandler(
                        console=self.console,
                        show_time=False,
                        show_path=False,
                        markup=False,
                    )
                    rich_handler.setLevel(handler.level)
                    rich_handler.set_name("stream_rich")
                    candidate.removeHandler(handler)
                    candidate.addHandler(rich_handler)
                    self._stream_handler = handler
                    self._rich_handler = rich_handler
                    self._target_logger = candidate
                    return
            if not candidate.propagate:
                return
            candidate = candidate.parent  # type: ignore[assignment]

    def _restore_stream_handler(self) -> None:
        if self._target_logger is None:
            return
        if self._rich_handler is not None:
            self._target_logger.removeHandler(self._rich_handler)
            self._rich_handler = None
        if self._stream_handler is not None:
            self._target_logger.addHandler(self._stream_handler)
            self._stream_handler = None
        self._target_logger = None

    def __enter__(self) -> "ProgressReporter":
        self._progress.start()
        self._install_rich_handler()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._restore_stream_handler()
        self._progress.stop()

    def complete(self, label: str) -> None:
        self._advance(f"  [green]✓[/green] {escape(label)}")

    def fail(self, label: str) -> None:
        self._advance(f"  [red]✗[/red] {escape(label)}")

    def _advance(self, line: str) -> None:
        self._completed += 1
        self._progress.console.print(line)
        self._progress.update(self._overall_task, completed=self._completed)
        self._progress.refresh()
