"""
Install lifecycle primitives for codeium-installer.

Handles:
- Platform detection
- Archive download from GitHub releases or an enterprise portal
- Single-flight install guard
- Progress stream for the asynchronous install pipeline
"""

from __future__ import annotations

import asyncio
import logging
import os
import platform
import tempfile
import threading
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional
from urllib.parse import urlparse

import requests

from codeium_installer.errors import DownloadError
from codeium_installer.types import InstallationStep

logger = logging.getLogger(__name__)


def is_arm64() -> bool:
    """Check if the current machine is an arm64-class CPU."""
    return platform.machine().lower() in ("arm64", "aarch64", "armv8", "armv8l")


def get_arch_name() -> str:
    """
    Get the architecture family used in release asset names.

    Returns:
        "arm" on arm64-class machines, "x64" otherwise
    """
    return "arm" if is_arm64() else "x64"


def validate_download_url(url: str) -> str:
    """
    Check that a download URL is well formed.

    Args:
        url: Candidate URL

    Returns:
        The URL unchanged

    Raises:
        DownloadError: If the URL has no http(s) scheme or no host
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise DownloadError(f"Malformed download URL: {url!r}", url=url)

    try:
        requests.models.PreparedRequest().prepare_url(url, None)
    except requests.exceptions.RequestException as e:
        raise DownloadError(f"Malformed download URL: {url!r}: {e}", url=url) from e
    return url


def download_archive(url: str, timeout: float = 60.0) -> Path:
    """
    Download an archive to a temporary file.

    The caller owns the returned file and must remove it.

    Args:
        url: Archive URL
        timeout: Request timeout in seconds

    Returns:
        Path to the downloaded temporary file

    Raises:
        DownloadError: If the download fails
    """
    fd, tmp_name = tempfile.mkstemp(prefix="language_server-", suffix=".gz")
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "wb") as f:
            response = requests.get(url, stream=True, timeout=timeout)
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
    except requests.exceptions.RequestException as e:
        tmp_path.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download language server from {url}: {e}", url=url) from e
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise DownloadError(f"Failed to save language server download: {e}", url=url) from e

    logger.debug(f"Downloaded {url} to {tmp_path}")
    return tmp_path


class InstallGuard:
    """
    Single-flight flag for the install pipeline.

    try_acquire() is an atomic test-and-set, so two installs racing from
    different threads or event loops cannot both proceed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._installing = False

    def try_acquire(self) -> bool:
        """Set the flag if it is clear. Returns False if it was already set."""
        with self._lock:
            if self._installing:
                return False
            self._installing = True
            return True

    def release(self) -> None:
        """Clear the flag."""
        with self._lock:
            self._installing = False

    @property
    def is_installing(self) -> bool:
        """Check if an install currently holds the guard."""
        with self._lock:
            return self._installing


# Shared by every InstallationManager that is not given its own guard
DEFAULT_INSTALL_GUARD = InstallGuard()


_END = object()

# Receives each progress step as it is emitted
StepEmitter = Callable[[InstallationStep], None]


class InstallationStream:
    """
    Async iterator over install progress steps.

    The pipeline runs in its own task from the moment the stream is created,
    independently of the consumer. Steps are queued until read; if the
    pipeline fails, iteration raises its error after the steps emitted
    before the failure. Abandoning iteration does not stop the pipeline.

    Example:
        stream = manager.install_latest_version()
        async for step in stream:
            print(step.value)
    """

    def __init__(self, pipeline: Callable[[StepEmitter], Awaitable[None]]):
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue()
        self._error: Optional[BaseException] = None
        self._finished = False
        self._task = asyncio.get_running_loop().create_task(self._run(pipeline))
        self._task.add_done_callback(self._on_done)

    async def _run(self, pipeline: Callable[[StepEmitter], Awaitable[None]]) -> None:
        try:
            await pipeline(self._queue.put_nowait)
        except Exception as e:
            self._error = e

    def _on_done(self, task: "asyncio.Task[None]") -> None:
        # Also runs for a task cancelled before it started
        if task.cancelled():
            self._error = asyncio.CancelledError()
        self._queue.put_nowait(_END)

    @property
    def task(self) -> "asyncio.Task[None]":
        """The task running the pipeline."""
        return self._task

    def __aiter__(self) -> "InstallationStream":
        return self

    async def __anext__(self) -> InstallationStep:
        if self._finished:
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _END:
            self._finished = True
            if self._error is not None:
                raise self._error
            raise StopAsyncIteration
        return item

    async def wait(self) -> None:
        """
        Wait for the pipeline to finish.

        Raises:
            The pipeline's error, if it failed
        """
        await asyncio.shield(self._task)
        if self._error is not None:
            raise self._error

    async def collect(self) -> List[InstallationStep]:
        """Consume the stream and return every step, raising on failure."""
        return [step async for step in self]
