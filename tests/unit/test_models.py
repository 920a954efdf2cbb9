"""Unit tests for the shared value types."""

import threading
from pathlib import Path
from typing import List

import pytest

from folder_uploader.exceptions import RunFatalError
from folder_uploader.models import Outcome, RunCounters, UploadTask


@pytest.fixture(scope="function")
def task(tmp_path: Path) -> UploadTask:
    return UploadTask.from_path(tmp_path, tmp_path / "A" / "img" / "logo.svg")


def test_upload_task_from_path(tmp_path: Path, task: UploadTask) -> None:
    assert task.absolute_path == tmp_path / "A" / "img" / "logo.svg"
    assert task.relative_key == "A/img/logo.svg"
    assert task.content_type == "image/svg+xml"


def test_counters_record_outcomes(task: UploadTask) -> None:
    """
    Tests that outcomes are tallied and the settled flag flips at the end.
    """
    counters: RunCounters = RunCounters(total=3)

    assert counters.record(Outcome.success(task, attempts=1)) == (1, 0)
    assert counters.record(Outcome.failure(task, attempts=4, reason="x")) == (1, 1)
    assert not counters.settled
    assert counters.record(Outcome.success(task, attempts=2)) == (2, 1)
    assert counters.settled
    assert (counters.uploaded, counters.failed, counters.total) == (2, 1, 3)


def test_counters_reject_overflow(task: UploadTask) -> None:
    """
    Tests that recording more outcomes than tasks raises `RunFatalError`.
    """
    counters: RunCounters = RunCounters(total=1)
    counters.record(Outcome.success(task, attempts=1))

    with pytest.raises(RunFatalError):
        counters.record(Outcome.success(task, attempts=1))
    assert counters.uploaded == 1


def test_counters_reject_negative_total() -> None:
    with pytest.raises(ValueError):
        RunCounters(total=-1)


def test_counters_are_thread_safe(task: UploadTask) -> None:
    """
    Tests that concurrent updates from many threads lose no increments.

    Arrange:
        - 8 threads each recording 500 outcomes, alternating success/failure.
    Act:
        - Run all threads to completion.
    Assert:
        - The counters add up exactly to the number of recorded outcomes.
    """
    threads_count: int = 8
    per_thread: int = 500
    counters: RunCounters = RunCounters(total=threads_count * per_thread)
    ok: Outcome = Outcome.success(task, attempts=1)
    bad: Outcome = Outcome.failure(task, attempts=1, reason="x")

    def worker() -> None:
        for i in range(per_thread):
            counters.record(ok if i % 2 == 0 else bad)

    threads: List[threading.Thread] = [
        threading.Thread(target=worker) for _ in range(threads_count)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counters.uploaded == threads_count * per_thread // 2
    assert counters.failed == threads_count * per_thread // 2
    assert counters.settled
