"""
Pytest configuration and fixtures for the folder-uploader tests.

This module provides:
- An in-memory `StorageSink` that records calls, can be told to fail, and
  tracks how many puts are in flight at once.
- An event sink that records every emitted event.
- A factory for building file trees in a temporary directory.
- Application configuration objects pointed at that directory.
"""

import asyncio
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from folder_uploader.config import AppConfig, Config, S3Config
from folder_uploader.events import Event
from folder_uploader.exceptions import TransferError

# --- Constants ---
S3_BUCKET: str = "test-bucket"
S3_REGION: str = "eu-west-1"


class FakeStorageSink:
    """
    An in-memory storage sink.

    Attributes:
        objects (Dict[str, Tuple[bytes, str]]): Stored body and content type
            per key.
        calls (List[str]): Every key passed to `put`, in call order.
        timeline (List[Tuple[str, str]]): `("start" | "end", key)` entries.
        max_in_flight (int): The highest number of concurrent puts observed.
    """

    def __init__(
        self,
        failures: Optional[Dict[str, int]] = None,
        delays: Optional[Dict[str, float]] = None,
        default_delay: float = 0.0,
    ) -> None:
        """
        Args:
            failures (Dict[str, int], optional): Number of times each key
                fails before succeeding. Use a large number to always fail.
            delays (Dict[str, float], optional): Seconds each key's put takes.
            default_delay (float): Seconds a put takes when not in `delays`.
        """
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.calls: List[str] = []
        self.timeline: List[Tuple[str, str]] = []
        self.max_in_flight: int = 0
        self._in_flight: int = 0
        self._failures: Dict[str, int] = dict(failures or {})
        self._delays: Dict[str, float] = dict(delays or {})
        self._default_delay: float = default_delay

    def calls_for(self, key: str) -> int:
        return self.calls.count(key)

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        self.calls.append(key)
        self.timeline.append(("start", key))
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(self._delays.get(key, self._default_delay))
            remaining: int = self._failures.get(key, 0)
            if remaining > 0:
                self._failures[key] = remaining - 1
                raise TransferError(f"simulated failure for '{key}'")
            self.objects[key] = (body, content_type)
        finally:
            self._in_flight -= 1
            self.timeline.append(("end", key))


class RecordingEventSink:
    """Collects every emitted event."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> List[Event]:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture(scope="function")
def fake_sink() -> FakeStorageSink:
    return FakeStorageSink()


@pytest.fixture(scope="function")
def recorder() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture(scope="function")
def s3_config() -> S3Config:
    return S3Config(
        bucket=S3_BUCKET,
        region=S3_REGION,
        access_key_id="test-key",
        secret_access_key="test-secret",
    )


@pytest.fixture(scope="function")
def make_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """
    Provide a factory that writes files below the temporary directory.

    Returns:
        A function taking a mapping of relative path -> text content and
        returning the base directory the files were written under.
    """

    def _creator(files: Dict[str, str]) -> Path:
        for relative, content in files.items():
            path: Path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return _creator


@pytest.fixture(scope="function")
def make_config(
    tmp_path: Path, s3_config: S3Config
) -> Callable[..., Config]:
    """
    Provide a factory for `Config` objects rooted at the temporary directory.

    Keyword arguments are forwarded to `AppConfig`; retries default to no
    delay so tests stay fast.
    """

    def _creator(**app_kwargs: object) -> Config:
        app_kwargs.setdefault("base_dir", tmp_path)
        app_kwargs.setdefault("retry_delay_ms", 0)
        return Config(destination=s3_config, app=AppConfig(**app_kwargs))

    return _creator


@pytest.fixture(scope="function")
def make_sink() -> Callable[..., FakeStorageSink]:
    """Provide the `FakeStorageSink` constructor for tests needing options."""
    return FakeStorageSink
