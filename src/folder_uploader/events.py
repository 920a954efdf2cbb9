"""
Progress events emitted during a run.

Components report what they are doing through an `EventSink`; the display
layer decides how (or whether) to render it. Sinks may be called from several
concurrently completing transfers and must serialize internally.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Protocol, Union

from folder_uploader.models import Outcome, RunReport

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanStarted:
    """Emitted before the first root is scanned."""

    root_count: int


@dataclass(frozen=True)
class ScanCompleted:
    """Emitted once scanning finishes with the number of files found."""

    count: int


@dataclass(frozen=True)
class FolderSkipped:
    """Emitted for each configured root that does not exist."""

    name: str


@dataclass(frozen=True)
class ItemCompleted:
    """
    Emitted exactly once per task, when its upload settles.

    Attributes:
        outcome (Outcome): The terminal outcome.
        uploaded (int): Successful uploads so far, including this one.
        failed (int): Failed uploads so far, including this one.
        total (int): Number of tasks in the run.
    """

    outcome: Outcome
    uploaded: int
    failed: int
    total: int


@dataclass(frozen=True)
class RunCompleted:
    """Emitted once with the final report."""

    report: RunReport


Event = Union[ScanStarted, ScanCompleted, FolderSkipped, ItemCompleted, RunCompleted]


class EventSink(Protocol):
    """Anything that can receive progress events."""

    def emit(self, event: Event) -> None:
        ...


class NullEventSink:
    """Discards every event."""

    def emit(self, event: Event) -> None:
        pass


class LoggingEventSink:
    """Renders events as plain log lines."""

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()

    def emit(self, event: Event) -> None:
        with self._lock:
            if isinstance(event, ScanStarted):
                logger.info(f"Scanning {event.root_count} folders for files...")
            elif isinstance(event, ScanCompleted):
                logger.info(f"Found {event.count} files to upload.")
            elif isinstance(event, FolderSkipped):
                logger.warning(
                    f"Folder '{event.name}' does not exist and will be skipped."
                )
            elif isinstance(event, ItemCompleted):
                logger.debug(
                    f"[{event.uploaded + event.failed}/{event.total}] "
                    f"{event.outcome.task.relative_key}: "
                    f"{event.outcome.status.value}"
                )
            elif isinstance(event, RunCompleted):
                report: RunReport = event.report
                logger.info(
                    f"Upload complete: {report.uploaded} uploaded, "
                    f"{report.failed} failed of {report.total} in "
                    f"{report.duration_seconds:.1f}s "
                    f"({report.throughput_files_per_second:.1f} files/s)."
                )
