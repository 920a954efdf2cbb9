"""Custom exceptions for the folder-uploader application."""


class FolderUploadError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigError(FolderUploadError):
    """Raised for missing or invalid configuration values."""

    pass


class NoRootsFoundError(FolderUploadError):
    """Raised when none of the configured root folders exist."""

    pass


class InvalidPathError(FolderUploadError):
    """Raised when a file path does not live under the base directory."""

    pass


class DirectoryReadError(FolderUploadError):
    """Raised when a directory cannot be listed during a scan."""

    pass


class TransferError(FolderUploadError):
    """Raised when a single upload attempt fails."""

    pass


class RunFatalError(FolderUploadError):
    """Raised when the scheduling of a run fails as a whole."""

    pass
