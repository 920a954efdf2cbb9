"""
Configuration for the folder-uploader pipeline.

This module centralizes all configuration, loading sensitive values from
environment variables and providing typed dataclasses for use throughout
the application.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Dict, Optional, Tuple

from folder_uploader.exceptions import ConfigError

DEFAULT_ROOTS: Tuple[str, ...] = ("ExamGenrator", "Grand", "Keylinks")

ENV_TEMPLATE: str = """
Please create a .env file with the following:
AWS_ACCESS_KEY_ID=your_access_key
AWS_SECRET_ACCESS_KEY=your_secret_key
AWS_REGION=your_region (defaults to us-east-1)
AWS_S3_BUCKET_NAME=your_bucket_name
CONCURRENCY=20 (optional, defaults to 20)
RETRY_ATTEMPTS=3 (optional, defaults to 3)
RETRY_DELAY=1000 (optional, defaults to 1000ms)
UPLOAD_FOLDERS=ExamGenrator,Grand,Keylinks (optional)
"""


def _get_env_var(name: str, default: Optional[str] = None) -> str:
    """
    Retrieves a required environment variable.

    Args:
        name (str): The name of the environment variable.
        default (str, optional): The default value if the variable is not set.

    Returns:
        str: The value of the environment variable.
    """
    value: Optional[str] = os.environ.get(name, default)
    if not value:
        raise ConfigError(f"Environment variable '{name}' must be set.")
    return value


def _get_int_env_var(name: str, default: int) -> int:
    """
    Retrieves an optional integer environment variable.

    Args:
        name (str): The name of the environment variable.
        default (int): The value used when the variable is unset or empty.

    Returns:
        int: The parsed value.
    """
    raw: Optional[str] = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip(), 10)
    except ValueError as e:
        raise ConfigError(
            f"Environment variable '{name}' must be an integer, got '{raw}'."
        ) from e


def _get_timeout_env_var(name: str) -> Optional[float]:
    """Parses an optional timeout in seconds; unset means no timeout."""
    raw: Optional[str] = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw.strip())
    except ValueError as e:
        raise ConfigError(
            f"Environment variable '{name}' must be a number, got '{raw}'."
        ) from e


def _get_roots_env_var(name: str) -> Tuple[str, ...]:
    raw: Optional[str] = os.environ.get(name)
    if raw is None or not raw.strip():
        return DEFAULT_ROOTS
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class S3Config:
    """
    Represents the configuration for the destination S3-compatible bucket.

    Attributes:
        bucket (str): The bucket name.
        region (str): The AWS region.
        access_key_id (str): The access key ID.
        secret_access_key (str): The secret access key.
        endpoint_url (str, optional): A custom S3 endpoint URL, or None for AWS.
    """

    bucket: str
    region: str
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "S3Config":
        """
        Builds the destination configuration from environment variables.

        Returns:
            S3Config: The destination configuration.
        """
        return cls(
            access_key_id=_get_env_var("AWS_ACCESS_KEY_ID"),
            secret_access_key=_get_env_var("AWS_SECRET_ACCESS_KEY"),
            bucket=_get_env_var("AWS_S3_BUCKET_NAME"),
            region=_get_env_var("AWS_REGION", "us-east-1"),
            endpoint_url=os.environ.get("AWS_ENDPOINT_URL") or None,
        )

    def as_boto_dict(self) -> Dict[str, str]:
        """
        Returns the configuration as a dictionary suitable for aiobotocore clients.

        Returns:
            Dict[str, str]: A dictionary of client parameters.
        """
        params: Dict[str, str] = {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "region_name": self.region,
        }
        if self.endpoint_url:
            params["endpoint_url"] = self.endpoint_url
        return params


@dataclass(frozen=True)
class AppConfig:
    """
    Defines the application's operational parameters.

    Attributes:
        roots (Tuple[str, ...]): Folder names, relative to `base_dir`, to upload.
        base_dir (Path): Directory that object keys are made relative to.
        concurrency (int): Number of uploads dispatched together in one group.
        retry_attempts (int): Retries allowed after the first failed attempt.
        retry_delay_ms (int): Fixed delay between attempts, in milliseconds.
        put_timeout_s (float, optional): Per-call timeout for the storage put.
    """

    roots: Tuple[str, ...] = DEFAULT_ROOTS
    base_dir: Path = field(default_factory=Path.cwd)
    concurrency: int = 20
    retry_attempts: int = 3
    retry_delay_ms: int = 1000
    put_timeout_s: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.roots:
            raise ConfigError("At least one folder to upload must be configured.")
        for root in self.roots:
            path: PurePath = PurePath(root)
            if path.anchor or ".." in path.parts:
                raise ConfigError(
                    f"Folder '{root}' must be a relative path inside the base "
                    "directory."
                )
        if self.concurrency < 1:
            raise ConfigError(
                f"Concurrency must be a positive integer, got {self.concurrency}."
            )
        if self.retry_attempts < 0:
            raise ConfigError(
                f"Retry attempts must not be negative, got {self.retry_attempts}."
            )
        if self.retry_delay_ms < 0:
            raise ConfigError(
                f"Retry delay must not be negative, got {self.retry_delay_ms}."
            )
        if self.put_timeout_s is not None and self.put_timeout_s <= 0:
            raise ConfigError(
                f"Upload timeout must be positive, got {self.put_timeout_s}."
            )

    @property
    def retry_delay_s(self) -> float:
        return self.retry_delay_ms / 1000

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Builds the operational parameters from environment variables.

        Returns:
            AppConfig: The application configuration.
        """
        base_dir: str = os.environ.get("UPLOAD_BASE_DIR") or os.getcwd()
        return cls(
            roots=_get_roots_env_var("UPLOAD_FOLDERS"),
            base_dir=Path(base_dir).resolve(),
            concurrency=_get_int_env_var("CONCURRENCY", 20),
            retry_attempts=_get_int_env_var("RETRY_ATTEMPTS", 3),
            retry_delay_ms=_get_int_env_var("RETRY_DELAY", 1000),
            put_timeout_s=_get_timeout_env_var("UPLOAD_TIMEOUT"),
        )


@dataclass(frozen=True)
class Config:
    """
    Top-level configuration container for the entire application.

    Attributes:
        destination (S3Config): Configuration for the destination bucket.
        app (AppConfig): General application settings.
    """

    destination: S3Config = field(default_factory=S3Config.from_env)
    app: AppConfig = field(default_factory=AppConfig.from_env)
