"""
Mapping of local file paths to object keys and content types.

Both functions are pure: they only inspect the path strings and never touch
the filesystem.
"""

from pathlib import Path, PurePath
from typing import Dict, Union

from folder_uploader.exceptions import InvalidPathError

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

CONTENT_TYPES: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".md": "text/markdown",
    ".xml": "application/xml",
    ".zip": "application/zip",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".wasm": "application/wasm",
}

PathLike = Union[str, PurePath]


def resolve_key(base_dir: PathLike, absolute_path: PathLike) -> str:
    """
    Computes the object key of a file relative to the base directory.

    Args:
        base_dir (PathLike): The directory that keys are relative to.
        absolute_path (PathLike): The file to compute a key for.

    Returns:
        str: The relative path joined with `/` separators.

    Raises:
        InvalidPathError: If the path is not located under `base_dir`.
    """
    base: PurePath = base_dir if isinstance(base_dir, PurePath) else PurePath(base_dir)
    path: PurePath = (
        absolute_path
        if isinstance(absolute_path, PurePath)
        else PurePath(absolute_path)
    )
    try:
        relative: PurePath = path.relative_to(base)
    except ValueError as e:
        raise InvalidPathError(f"'{path}' is not under '{base}'") from e

    if not relative.parts or ".." in relative.parts:
        raise InvalidPathError(f"'{path}' does not name a file under '{base}'")
    # Keys never contain backslashes, even when a POSIX file name does.
    return relative.as_posix().replace("\\", "/")


def resolve_content_type(absolute_path: PathLike) -> str:
    """
    Looks up the MIME type for a file from its extension.

    Args:
        absolute_path (PathLike): The file path.

    Returns:
        str: The MIME type, or `application/octet-stream` if unknown.
    """
    suffix: str = Path(absolute_path).suffix.lower()
    return CONTENT_TYPES.get(suffix, DEFAULT_CONTENT_TYPE)
