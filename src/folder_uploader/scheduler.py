"""
Barrier-grouped concurrent execution of upload tasks.

Tasks are split into consecutive groups of `concurrency` items. Every task in
a group runs concurrently and the whole group settles before the next one
starts, so no more than `concurrency` uploads are ever in flight.
"""

import asyncio
import logging
from typing import Iterator, List, Sequence

from folder_uploader.config import AppConfig
from folder_uploader.events import EventSink, ItemCompleted, NullEventSink
from folder_uploader.exceptions import FolderUploadError, RunFatalError
from folder_uploader.models import Outcome, RunCounters, UploadTask
from folder_uploader.storage import StorageSink
from folder_uploader.worker import upload_file

logger: logging.Logger = logging.getLogger(__name__)


def batched(tasks: Sequence[UploadTask], size: int) -> Iterator[List[UploadTask]]:
    """
    Yields consecutive groups of `size` tasks; the last group may be smaller.

    Args:
        tasks (Sequence[UploadTask]): The tasks to partition.
        size (int): The group size.

    Yields:
        List[UploadTask]: One group of tasks.
    """
    if size < 1:
        raise ValueError(f"Group size must be positive, got {size}")
    for start in range(0, len(tasks), size):
        yield list(tasks[start : start + size])


class BatchScheduler:
    """Runs upload tasks group by group and accounts for their outcomes."""

    def __init__(
        self,
        sink: StorageSink,
        app_config: AppConfig,
        events: EventSink = NullEventSink(),
    ) -> None:
        """
        Initializes the scheduler.

        Args:
            sink (StorageSink): The storage destination.
            app_config (AppConfig): Concurrency and retry settings.
            events (EventSink): Receives one `ItemCompleted` per task.
        """
        self._sink: StorageSink = sink
        self._config: AppConfig = app_config
        self._events: EventSink = events

    async def run(
        self, tasks: Sequence[UploadTask], counters: RunCounters
    ) -> RunCounters:
        """
        Uploads every task and records each outcome in `counters`.

        Args:
            tasks (Sequence[UploadTask]): The tasks to upload.
            counters (RunCounters): Counters sized for `tasks`.

        Returns:
            RunCounters: The same counters, fully settled.

        Raises:
            RunFatalError: If scheduling itself fails.
        """
        if counters.total != len(tasks):
            raise RunFatalError(
                f"Counters sized for {counters.total} tasks, got {len(tasks)}."
            )

        concurrency: int = self._config.concurrency
        group_count: int = -(-len(tasks) // concurrency)
        try:
            for index, group in enumerate(batched(tasks, concurrency), start=1):
                logger.debug(
                    f"Dispatching group {index}/{group_count} "
                    f"with {len(group)} tasks."
                )
                await asyncio.gather(
                    *(self._run_one(task, counters) for task in group)
                )
        except FolderUploadError:
            raise
        except Exception as e:
            raise RunFatalError(f"Scheduling failed: {e}") from e

        if not counters.settled:
            raise RunFatalError(
                f"Run ended with {counters.uploaded + counters.failed} of "
                f"{counters.total} tasks accounted for."
            )
        return counters

    async def _run_one(self, task: UploadTask, counters: RunCounters) -> None:
        """
        Uploads one task, converting unexpected errors into a failed outcome.

        Args:
            task (UploadTask): The task to upload.
            counters (RunCounters): Counters to record the outcome in.
        """
        outcome: Outcome
        try:
            outcome = await upload_file(task, self._sink, self._config)
        except Exception as e:
            logger.exception(f"Unexpected error uploading '{task.absolute_path}'")
            outcome = Outcome.failure(
                task, attempts=1, reason=f"{type(e).__name__}: {e}"
            )

        uploaded, failed = counters.record(outcome)
        self._events.emit(
            ItemCompleted(
                outcome=outcome,
                uploaded=uploaded,
                failed=failed,
                total=counters.total,
            )
        )
