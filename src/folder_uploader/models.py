"""Value types shared by the scanner, the transfer worker and the scheduler."""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from folder_uploader.exceptions import RunFatalError
from folder_uploader.paths import resolve_content_type, resolve_key


@dataclass(frozen=True)
class UploadTask:
    """
    A single file queued for upload.

    Attributes:
        absolute_path (Path): Location of the file on disk.
        relative_key (str): Object key the file is stored under.
        content_type (str): MIME type sent with the object.
    """

    absolute_path: Path
    relative_key: str
    content_type: str

    @classmethod
    def from_path(cls, base_dir: Path, absolute_path: Path) -> "UploadTask":
        """
        Builds a task, resolving its key and content type.

        Args:
            base_dir (Path): The directory keys are relative to.
            absolute_path (Path): The discovered file.

        Returns:
            UploadTask: The resolved task.
        """
        return cls(
            absolute_path=absolute_path,
            relative_key=resolve_key(base_dir, absolute_path),
            content_type=resolve_content_type(absolute_path),
        )


class OutcomeStatus(Enum):
    """Terminal status of a transfer."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Outcome:
    """
    The terminal result of uploading one task.

    Attributes:
        task (UploadTask): The task the outcome belongs to.
        status (OutcomeStatus): Whether the upload succeeded.
        attempts (int): Number of upload attempts made.
        reason (str, optional): Description of the last error on failure.
    """

    task: UploadTask
    status: OutcomeStatus
    attempts: int
    reason: Optional[str] = None

    @classmethod
    def success(cls, task: UploadTask, attempts: int) -> "Outcome":
        return cls(task=task, status=OutcomeStatus.SUCCESS, attempts=attempts)

    @classmethod
    def failure(cls, task: UploadTask, attempts: int, reason: str) -> "Outcome":
        return cls(
            task=task, status=OutcomeStatus.FAILURE, attempts=attempts, reason=reason
        )

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


class RunCounters:
    """
    Thread-safe success/failure accounting for a single run.

    All mutation goes through `record`, which holds a lock so concurrently
    completing transfers never lose an increment.
    """

    def __init__(self, total: int) -> None:
        """
        Initialize the counters.

        Args:
            total (int): Number of tasks the run will process.
        """
        if total < 0:
            raise ValueError(f"total must not be negative, got {total}")
        self._lock: threading.Lock = threading.Lock()
        self._total: int = total
        self._uploaded: int = 0
        self._failed: int = 0

    @property
    def total(self) -> int:
        return self._total

    @property
    def uploaded(self) -> int:
        with self._lock:
            return self._uploaded

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    def record(self, outcome: Outcome) -> Tuple[int, int]:
        """
        Counts a terminal outcome.

        Args:
            outcome (Outcome): The settled outcome.

        Returns:
            Tuple[int, int]: The `(uploaded, failed)` counts after the update.

        Raises:
            RunFatalError: If more outcomes are recorded than there are tasks.
        """
        with self._lock:
            if self._uploaded + self._failed >= self._total:
                raise RunFatalError(
                    f"Recorded more outcomes than the {self._total} scheduled tasks."
                )
            if outcome.succeeded:
                self._uploaded += 1
            else:
                self._failed += 1
            return self._uploaded, self._failed

    @property
    def settled(self) -> bool:
        """True once every task has a recorded outcome."""
        with self._lock:
            return self._uploaded + self._failed == self._total


@dataclass(frozen=True)
class RunReport:
    """
    Final summary of a run.

    Attributes:
        total (int): Number of files discovered.
        uploaded (int): Number of files uploaded successfully.
        failed (int): Number of files that exhausted their retries.
        duration_seconds (float): Wall time spent uploading.
        throughput_files_per_second (float): `uploaded / duration_seconds`.
        roots (Tuple[str, ...]): Configured roots that existed on disk.
        sample_key (str, optional): Key of the first discovered file.
    """

    total: int
    uploaded: int
    failed: int
    duration_seconds: float
    throughput_files_per_second: float
    roots: Tuple[str, ...] = ()
    sample_key: Optional[str] = None
