"""
Recursive discovery of the files to upload.

The scan is best-effort: missing roots are skipped with a `FolderSkipped`
event and unreadable directories are logged, but neither aborts the run.
"""

import logging
import os
from pathlib import Path
from typing import List, Sequence

from folder_uploader.events import (
    EventSink,
    FolderSkipped,
    NullEventSink,
    ScanCompleted,
    ScanStarted,
)
from folder_uploader.exceptions import DirectoryReadError

logger: logging.Logger = logging.getLogger(__name__)


def existing_roots(roots: Sequence[str], base_dir: Path) -> List[str]:
    """
    Filters the configured roots down to those that are directories on disk.

    Args:
        roots (Sequence[str]): Root folder names, relative to `base_dir`.
        base_dir (Path): The base directory.

    Returns:
        List[str]: The roots that exist, in configured order.
    """
    return [root for root in roots if (base_dir / root).is_dir()]


def _scan_dir(directory: Path, found: List[Path]) -> None:
    """
    Appends every regular file below `directory` to `found`, depth-first.

    Entries are visited in name order so repeated scans of an unchanged tree
    produce the same list. Symlinks and special files are ignored.
    """
    try:
        with os.scandir(directory) as it:
            entries: List[os.DirEntry] = sorted(it, key=lambda e: e.name)
    except OSError as e:
        error: DirectoryReadError = DirectoryReadError(
            f"Error scanning directory '{directory}': {e}"
        )
        logger.error(str(error))
        return

    for entry in entries:
        path: Path = directory / entry.name
        try:
            if entry.is_dir(follow_symlinks=False):
                _scan_dir(path, found)
            elif entry.is_file(follow_symlinks=False):
                found.append(path)
        except OSError as e:
            logger.error(f"Error inspecting '{path}': {e}")


def scan(
    roots: Sequence[str],
    base_dir: Path,
    events: EventSink = NullEventSink(),
) -> List[Path]:
    """
    Enumerates all regular files under the given roots.

    Args:
        roots (Sequence[str]): Root folder names, relative to `base_dir`,
            scanned in the given order.
        base_dir (Path): The base directory.
        events (EventSink): Receives scan and skip events.

    Returns:
        List[Path]: Absolute paths of the discovered files.
    """
    events.emit(ScanStarted(root_count=len(roots)))
    found: List[Path] = []

    for root in roots:
        root_path: Path = base_dir / root
        if not root_path.is_dir():
            logger.debug(f"Skipping missing folder '{root_path}'.")
            events.emit(FolderSkipped(name=root))
            continue
        _scan_dir(root_path, found)

    logger.debug(f"Scan of {len(roots)} folders found {len(found)} files.")
    events.emit(ScanCompleted(count=len(found)))
    return found
