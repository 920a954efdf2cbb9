"""
Defines the core transfer worker function.

This module contains the logic for uploading a single file: reading it into
memory, resolving where it goes and handing it to the storage sink, retrying
failed attempts with a fixed delay between them.
"""

import asyncio
import logging
from pathlib import Path
from typing import Tuple, Type

from botocore.exceptions import BotoCoreError, ClientError

from folder_uploader.config import AppConfig
from folder_uploader.exceptions import TransferError
from folder_uploader.models import Outcome, UploadTask
from folder_uploader.storage import StorageSink

logger: logging.Logger = logging.getLogger(__name__)

# Errors that describe a failed attempt rather than a bug in the caller.
# OSError also covers read failures and TimeoutError.
RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    OSError,
    ClientError,
    BotoCoreError,
    TransferError,
)


async def _read_file(path: Path) -> bytes:
    loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, path.read_bytes)


async def _attempt_upload(
    task: UploadTask,
    sink: StorageSink,
    app_config: AppConfig,
) -> None:
    """
    Makes a single upload attempt.

    Args:
        task (UploadTask): The file to upload.
        sink (StorageSink): The storage destination.
        app_config (AppConfig): Provides the optional per-call timeout.
    """
    body: bytes = await _read_file(task.absolute_path)
    try:
        put = sink.put(task.relative_key, body, task.content_type)
        if app_config.put_timeout_s is None:
            await put
        else:
            await asyncio.wait_for(put, timeout=app_config.put_timeout_s)
    except asyncio.TimeoutError as e:
        raise TransferError(
            f"Upload timed out after {app_config.put_timeout_s}s"
        ) from e
    except RETRYABLE_ERRORS:
        raise
    except Exception as e:
        # Any failure reported by the sink counts as a failed attempt.
        raise TransferError(f"{type(e).__name__}: {e}") from e


async def upload_file(
    task: UploadTask,
    sink: StorageSink,
    app_config: AppConfig,
    attempt: int = 0,
) -> Outcome:
    """
    Uploads one file, retrying failed attempts.

    Attempts are numbered from `attempt` and run strictly one after another.
    After a failed attempt numbered below `app_config.retry_attempts`, the
    worker sleeps `retry_delay_ms` and tries again; a failure on attempt
    `retry_attempts` is final. A task failing every time starting from
    attempt 0 therefore makes `retry_attempts + 1` storage calls.

    Every error raised by the sink or while reading the file is retried.
    Other errors are not retried and propagate to the caller.

    Args:
        task (UploadTask): The file to upload.
        sink (StorageSink): The storage destination.
        app_config (AppConfig): Retry limits, delay and timeout.
        attempt (int): The number of the first attempt.

    Returns:
        Outcome: A success, or a failure carrying the last error.
    """
    calls: int = 0
    while True:
        calls += 1
        try:
            await _attempt_upload(task, sink, app_config)
        except RETRYABLE_ERRORS as e:
            reason: str = f"{type(e).__name__}: {e}"
            if attempt >= app_config.retry_attempts:
                logger.error(
                    f"Failed to upload '{task.absolute_path}' after "
                    f"{calls} attempt(s): {reason}"
                )
                return Outcome.failure(task, attempts=calls, reason=reason)

            logger.warning(
                f"Upload of '{task.relative_key}' failed "
                f"(attempt {attempt + 1}/{app_config.retry_attempts + 1}): "
                f"{reason}. Retrying in {app_config.retry_delay_ms}ms."
            )
            await asyncio.sleep(app_config.retry_delay_s)
            attempt += 1
            continue

        logger.debug(f"Uploaded '{task.relative_key}' ({task.content_type}).")
        return Outcome.success(task, attempts=calls)
