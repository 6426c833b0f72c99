"""Tests for codeium_installer._core.lifecycle module."""

import asyncio
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from codeium_installer._core.lifecycle import (
    DEFAULT_INSTALL_GUARD,
    InstallGuard,
    InstallationStream,
    download_archive,
    get_arch_name,
    is_arm64,
    validate_download_url,
)
from codeium_installer.errors import DownloadError
from codeium_installer.types import InstallationStep


class TestGetArchName:
    """Tests for architecture detection."""

    def test_returns_known_value(self):
        assert get_arch_name() in ("arm", "x64")

    @pytest.mark.parametrize("machine", ["arm64", "aarch64", "ARM64"])
    def test_arm_machines(self, machine):
        with patch("platform.machine", return_value=machine):
            assert is_arm64() is True
            assert get_arch_name() == "arm"

    @pytest.mark.parametrize("machine", ["x86_64", "AMD64", "i386"])
    def test_other_machines(self, machine):
        with patch("platform.machine", return_value=machine):
            assert is_arm64() is False
            assert get_arch_name() == "x64"


class TestValidateDownloadUrl:
    """Tests for validate_download_url function."""

    def test_valid_url(self):
        url = "https://github.com/Exafunction/codeium/releases/download/x/y.gz"
        assert validate_download_url(url) == url

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "not a url/language-server-v1.9.2/language_server_macos_x64.gz",
            "/language-server-v1.9.2/language_server_macos_x64.gz",
            "ftp://example.com/language_server_macos_x64.gz",
            "https:///language_server_macos_x64.gz",
        ],
    )
    def test_malformed_urls(self, url):
        with pytest.raises(DownloadError) as exc_info:
            validate_download_url(url)
        assert exc_info.value.url == url


class TestDownloadArchive:
    """Tests for download_archive function."""

    @patch("requests.get")
    def test_download_success(self, mock_get):
        mock_response = MagicMock()
        mock_response.iter_content = MagicMock(return_value=[b"gz", b"", b"data"])
        mock_response.raise_for_status = MagicMock()
        mock_get.return_value = mock_response

        result = download_archive("https://example.com/ls.gz", timeout=5)

        try:
            assert result.exists()
            assert result.read_bytes() == b"gzdata"
            mock_get.assert_called_once_with("https://example.com/ls.gz", stream=True, timeout=5)
        finally:
            result.unlink()

    @patch("requests.get")
    def test_download_404_error(self, mock_get):
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")
        mock_get.return_value = mock_response

        with pytest.raises(DownloadError) as exc_info:
            download_archive("https://example.com/ls.gz")
        assert exc_info.value.url == "https://example.com/ls.gz"

    @patch("tempfile.mkstemp")
    @patch("requests.get")
    def test_failed_download_removes_temp_file(self, mock_get, mock_mkstemp, tmp_path):
        import os

        tmp_file = tmp_path / "download.gz"
        fd = os.open(tmp_file, os.O_CREAT | os.O_WRONLY)
        mock_mkstemp.return_value = (fd, str(tmp_file))
        mock_get.side_effect = requests.exceptions.ConnectionError("offline")

        with pytest.raises(DownloadError):
            download_archive("https://example.com/ls.gz")

        assert not tmp_file.exists()


class TestInstallGuard:
    """Tests for InstallGuard class."""

    def test_acquire_and_release(self):
        guard = InstallGuard()
        assert guard.is_installing is False
        assert guard.try_acquire() is True
        assert guard.is_installing is True
        assert guard.try_acquire() is False
        guard.release()
        assert guard.is_installing is False
        assert guard.try_acquire() is True

    def test_guards_are_independent(self):
        first = InstallGuard()
        second = InstallGuard()
        assert first.try_acquire() is True
        assert second.try_acquire() is True

    def test_default_guard_exists(self):
        assert isinstance(DEFAULT_INSTALL_GUARD, InstallGuard)

    def test_only_one_thread_wins(self):
        guard = InstallGuard()
        barrier = threading.Barrier(8)
        results = []

        def contend():
            barrier.wait()
            results.append(guard.try_acquire())

        threads = [threading.Thread(target=contend) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1


class TestInstallationStream:
    """Tests for InstallationStream class."""

    @pytest.mark.asyncio
    async def test_yields_steps_in_order(self):
        async def pipeline(emit):
            emit(InstallationStep.DOWNLOADING)
            await asyncio.sleep(0)
            emit(InstallationStep.DONE)

        stream = InstallationStream(pipeline)
        steps = [step async for step in stream]

        assert steps == [InstallationStep.DOWNLOADING, InstallationStep.DONE]

    @pytest.mark.asyncio
    async def test_error_raised_after_emitted_steps(self):
        async def pipeline(emit):
            emit(InstallationStep.DOWNLOADING)
            raise DownloadError("offline")

        stream = InstallationStream(pipeline)
        received = []
        with pytest.raises(DownloadError):
            async for step in stream:
                received.append(step)

        assert received == [InstallationStep.DOWNLOADING]

    @pytest.mark.asyncio
    async def test_iteration_ends_after_finish(self):
        async def pipeline(emit):
            emit(InstallationStep.DONE)

        stream = InstallationStream(pipeline)
        assert await stream.collect() == [InstallationStep.DONE]
        assert await stream.collect() == []

    @pytest.mark.asyncio
    async def test_pipeline_runs_without_consumer(self):
        finished = asyncio.Event()

        async def pipeline(emit):
            emit(InstallationStep.DOWNLOADING)
            finished.set()

        stream = InstallationStream(pipeline)
        await asyncio.wait_for(finished.wait(), timeout=1)
        await stream.wait()
        assert stream.task.done()

    @pytest.mark.asyncio
    async def test_wait_raises_pipeline_error(self):
        async def pipeline(emit):
            raise DownloadError("offline")

        stream = InstallationStream(pipeline)
        with pytest.raises(DownloadError):
            await stream.wait()

    @pytest.mark.asyncio
    async def test_cancelled_task_ends_stream(self):
        started = asyncio.Event()

        async def pipeline(emit):
            started.set()
            await asyncio.sleep(100)

        stream = InstallationStream(pipeline)
        await started.wait()
        stream.task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await stream.collect()

    def test_requires_running_loop(self):
        async def pipeline(emit):
            pass

        with pytest.raises(RuntimeError):
            InstallationStream(pipeline)
