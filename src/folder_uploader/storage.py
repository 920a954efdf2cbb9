"""
Storage sinks that uploaded files are written to.

The transfer worker only depends on the `StorageSink` protocol. `S3Sink` is
the production implementation backed by an aiobotocore S3 client.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional, Protocol

from aiobotocore.session import AioSession, get_session
from botocore.config import Config as BotoConfig

from folder_uploader.config import S3Config

if TYPE_CHECKING:
    from types_aiobotocore_s3.client import S3Client

logger: logging.Logger = logging.getLogger(__name__)

PUBLIC_READ_ACL: str = "public-read"


class StorageSink(Protocol):
    """The single write operation the uploader needs from a storage backend."""

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        ...


class S3Sink:
    """
    Writes objects to an S3-compatible bucket with public-read visibility.

    Must be used as an async context manager, which owns the client lifetime.
    """

    def __init__(
        self,
        s3_config: S3Config,
        max_pool_connections: int = 10,
        session: Optional[AioSession] = None,
    ) -> None:
        """
        Initializes the sink.

        Args:
            s3_config (S3Config): Destination bucket and credentials.
            max_pool_connections (int): Size of the HTTP connection pool.
            session (AioSession, optional): Session to create the client from.
        """
        self._config: S3Config = s3_config
        self._session: AioSession = session or get_session()
        # Retries are owned by the transfer worker, so botocore makes a
        # single attempt per put.
        self._boto_config: BotoConfig = BotoConfig(
            signature_version="s3v4",
            max_pool_connections=max_pool_connections,
            retries={"max_attempts": 1, "mode": "standard"},
        )
        self._client_cm: Any = None
        self._client: Optional["S3Client"] = None

    async def __aenter__(self) -> "S3Sink":
        self._client_cm = self._session.create_client(
            "s3", **self._config.as_boto_dict(), config=self._boto_config
        )
        self._client = await self._client_cm.__aenter__()
        logger.debug(f"S3 client opened for bucket '{self._config.bucket}'.")
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client_cm is not None:
            await self._client_cm.__aexit__(*args)
        self._client_cm = None
        self._client = None
        logger.debug(f"S3 client closed for bucket '{self._config.bucket}'.")

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        """
        Uploads one object.

        Args:
            key (str): The object key.
            body (bytes): The full object content.
            content_type (str): The MIME type stored with the object.
        """
        if self._client is None:
            raise RuntimeError("S3Sink must be entered before use.")
        await self._client.put_object(
            Bucket=self._config.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            ACL=PUBLIC_READ_ACL,
        )


def public_url(s3_config: S3Config, key: str = "") -> str:
    """
    Derives the public URL of an object.

    Args:
        s3_config (S3Config): The destination configuration.
        key (str): The object key; empty for the bucket prefix.

    Returns:
        str: `https://{bucket}.s3.{region}.amazonaws.com/{key}` for AWS, or
            `{endpoint}/{bucket}/{key}` for a custom endpoint.
    """
    if s3_config.endpoint_url:
        return f"{s3_config.endpoint_url.rstrip('/')}/{s3_config.bucket}/{key}"
    return f"https://{s3_config.bucket}.s3.{s3_config.region}.amazonaws.com/{key}"
