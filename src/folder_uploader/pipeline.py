"""Core orchestration logic for the folder-uploader pipeline."""

import logging
import time
from pathlib import Path
from typing import List, Optional

from folder_uploader.config import AppConfig, Config
from folder_uploader.events import EventSink, LoggingEventSink, RunCompleted
from folder_uploader.exceptions import (
    FolderUploadError,
    NoRootsFoundError,
    RunFatalError,
)
from folder_uploader.models import RunCounters, RunReport, UploadTask
from folder_uploader.scanner import existing_roots, scan
from folder_uploader.scheduler import BatchScheduler
from folder_uploader.storage import S3Sink, StorageSink

logger: logging.Logger = logging.getLogger(__name__)


def _throughput(uploaded: int, duration_s: float) -> float:
    if duration_s <= 0:
        return 0.0
    return uploaded / duration_s


class UploadPipeline:
    """Orchestrates a run from scan to final report."""

    def __init__(
        self,
        config: Config,
        sink: Optional[StorageSink] = None,
        events: Optional[EventSink] = None,
    ) -> None:
        """
        Initializes the pipeline with the given configuration.

        Args:
            config (Config): The application configuration.
            sink (StorageSink, optional): Storage destination to use. When
                omitted an `S3Sink` is opened for `config.destination`.
            events (EventSink, optional): Receives progress events. Defaults
                to a `LoggingEventSink`.
        """
        self._config: Config = config
        self._sink: Optional[StorageSink] = sink
        self._events: EventSink = events or LoggingEventSink()

    async def run(self) -> RunReport:
        """
        Executes the full upload.

        This method checks that at least one root exists, scans the roots,
        uploads every discovered file and summarizes the result.

        Returns:
            RunReport: Counts, duration and throughput of the run.

        Raises:
            NoRootsFoundError: If none of the configured roots exist.
            RunFatalError: If scheduling fails as a whole.
        """
        app: AppConfig = self._config.app
        base_dir: Path = app.base_dir
        roots: List[str] = existing_roots(app.roots, base_dir)
        if not roots:
            raise NoRootsFoundError(
                f"None of the specified folders exist under '{base_dir}': "
                f"{', '.join(app.roots)}"
            )

        logger.info(
            f"Starting upload of {', '.join(app.roots)} to bucket "
            f"'{self._config.destination.bucket}' "
            f"(concurrency {app.concurrency})."
        )
        files: List[Path] = scan(app.roots, base_dir, self._events)
        tasks: List[UploadTask] = [
            UploadTask.from_path(base_dir, path) for path in files
        ]

        if not tasks:
            logger.info("No files found to upload.")
            report: RunReport = RunReport(
                total=0,
                uploaded=0,
                failed=0,
                duration_seconds=0.0,
                throughput_files_per_second=0.0,
                roots=tuple(roots),
            )
            self._events.emit(RunCompleted(report=report))
            return report

        counters: RunCounters = RunCounters(total=len(tasks))
        start_time: float = time.monotonic()
        if self._sink is not None:
            await self._run_transfers(self._sink, tasks, counters)
        else:
            async with S3Sink(
                self._config.destination,
                max_pool_connections=app.concurrency + 10,
            ) as sink:
                await self._run_transfers(sink, tasks, counters)
        duration_s: float = time.monotonic() - start_time

        report = RunReport(
            total=counters.total,
            uploaded=counters.uploaded,
            failed=counters.failed,
            duration_seconds=duration_s,
            throughput_files_per_second=_throughput(counters.uploaded, duration_s),
            roots=tuple(roots),
            sample_key=tasks[0].relative_key,
        )
        if report.failed:
            logger.warning(f"{report.failed} of {report.total} files failed to upload.")
        self._events.emit(RunCompleted(report=report))
        return report

    async def _run_transfers(
        self,
        sink: StorageSink,
        tasks: List[UploadTask],
        counters: RunCounters,
    ) -> None:
        """
        Runs the scheduler, wrapping unexpected errors as `RunFatalError`.

        Args:
            sink (StorageSink): The storage destination.
            tasks (List[UploadTask]): The tasks to upload.
            counters (RunCounters): The run's counters.
        """
        scheduler: BatchScheduler = BatchScheduler(sink, self._config.app, self._events)
        try:
            await scheduler.run(tasks, counters)
        except FolderUploadError:
            raise
        except Exception as e:
            raise RunFatalError(f"Upload run aborted: {e}") from e
