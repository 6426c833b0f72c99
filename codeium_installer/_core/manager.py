"""
Language server installation manager.

InstallationManager answers "is the language server installed and current?"
and runs the install pipeline when it is not:

    manager = InstallationManager()
    status = manager.check_installation()
    if status.needs_install:
        async for step in manager.install_latest_version():
            print(step.value)

Queries never raise; they degrade to NotInstalled or Outdated("Unknown", ...).
The install pipeline and uninstall raise typed errors.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Optional

from codeium_installer._core.folders import (
    FolderProvider,
    create_folders_if_needed,
)
from codeium_installer._core.lifecycle import (
    DEFAULT_INSTALL_GUARD,
    InstallGuard,
    InstallationStream,
    StepEmitter,
    download_archive,
    get_arch_name,
    validate_download_url,
)
from codeium_installer._core.terminal import Terminal
from codeium_installer._core.version import (
    LATEST_SUPPORTED_VERSION,
    compare_versions,
    get_download_url,
    get_enterprise_download_url,
)
from codeium_installer.config import ConfigSource, ModeConfig
from codeium_installer.errors import (
    AlreadyInstallingError,
    CopyError,
    DecompressionError,
    DownloadError,
    PermissionFailureError,
    PersistError,
    RemovalError,
    TerminalError,
)
from codeium_installer.types import (
    UNKNOWN_VERSION,
    InstallationStatus,
    InstallationStep,
    Installed,
    NotInstalled,
    Ordering,
    Outdated,
    Unsupported,
)

logger = logging.getLogger(__name__)

# rwxr-xr-x
EXECUTABLE_MODE = (
    stat.S_IRWXU
    | stat.S_IRGRP | stat.S_IXGRP
    | stat.S_IROTH | stat.S_IXOTH
)

DECOMPRESS_COMMAND = "gunzip"


class InstallationManager:
    """
    Detects, installs and removes the Codeium language server binary.

    Args:
        config_source: Returns the current ModeConfig; polled once per
            operation (default: ModeConfig.from_env)
        folder_provider: Resolves the install directories
            (default: create_folders_if_needed)
        terminal: Runs the decompression command (default: Terminal())
        guard: Single-flight guard. Managers built without one share a
            process-wide guard.
        download_timeout: Request timeout for the archive download, in seconds
    """

    def __init__(
        self,
        config_source: Optional[ConfigSource] = None,
        folder_provider: Optional[FolderProvider] = None,
        terminal: Optional[Terminal] = None,
        guard: Optional[InstallGuard] = None,
        download_timeout: float = 60.0,
    ):
        self.config_source = config_source or ModeConfig.from_env
        self.folder_provider = folder_provider or create_folders_if_needed
        self.terminal = terminal or Terminal()
        self.guard = guard or DEFAULT_INSTALL_GUARD
        self.download_timeout = download_timeout

    # -------------------------------------------------------------------------
    # Mode resolution
    # -------------------------------------------------------------------------

    def is_enterprise(self) -> bool:
        """Check if enterprise mode is fully configured."""
        return self.config_source().is_enterprise

    def get_latest_supported_version(self) -> str:
        """Get the language server version the install targets."""
        return self._target_version(self.config_source())

    def get_download_url(self) -> str:
        """Get the archive URL for the target version and this machine."""
        return self._download_url(self.config_source())

    @staticmethod
    def _target_version(config: ModeConfig) -> str:
        if config.is_enterprise:
            return config.enterprise_version
        return LATEST_SUPPORTED_VERSION

    @staticmethod
    def _download_url(config: ModeConfig) -> str:
        arch_name = get_arch_name()
        if config.is_enterprise:
            return get_enterprise_download_url(
                config.portal_url, config.enterprise_version, arch_name
            )
        return get_download_url(LATEST_SUPPORTED_VERSION, arch_name)

    # -------------------------------------------------------------------------
    # Installation check
    # -------------------------------------------------------------------------

    def check_installation(self) -> InstallationStatus:
        """
        Report whether the language server is installed and current.

        Never raises for filesystem problems: an unresolvable install
        directory reports NotInstalled, and a binary without a readable
        version marker reports Outdated("Unknown", latest).

        Returns:
            NotInstalled, Installed, Outdated or Unsupported
        """
        try:
            folders = self.folder_provider()
        except Exception as e:
            logger.debug(f"Could not resolve install directory: {e}")
            return NotInstalled()

        try:
            if not folders.binary_path.is_file():
                return NotInstalled()
        except OSError as e:
            logger.debug(f"Could not inspect language server binary: {e}")
            return NotInstalled()

        latest = self.get_latest_supported_version()

        try:
            version = folders.version_file_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Could not read version marker: {e}")
            return Outdated(current=UNKNOWN_VERSION, latest=latest)

        ordering = compare_versions(version, latest)
        if ordering is Ordering.OLDER:
            return Outdated(current=version, latest=latest)
        if ordering is Ordering.NEWER:
            return Unsupported(current=version, latest=latest)
        return Installed(version=version)

    # -------------------------------------------------------------------------
    # Install
    # -------------------------------------------------------------------------

    def install_latest_version(self) -> InstallationStream:
        """
        Start installing the target language server version.

        Must be called from a running event loop. The pipeline runs in its
        own task; iterate the returned stream to observe progress:
        DOWNLOADING, UNINSTALLING, DECOMPRESSING, DONE.

        Returns:
            InstallationStream of InstallationStep

        The stream raises:
            AlreadyInstallingError: If another install holds the guard
            DownloadError, CopyError, DecompressionError,
            PermissionFailureError, PersistError, RemovalError:
                If the corresponding step fails
        """
        return InstallationStream(self._run_install)

    async def _run_install(self, emit: StepEmitter) -> None:
        if not self.guard.try_acquire():
            logger.warning("Language server install already in progress")
            raise AlreadyInstallingError()

        try:
            await self._install(emit)
        finally:
            self.guard.release()

    async def _install(self, emit: StepEmitter) -> None:
        loop = asyncio.get_running_loop()

        emit(InstallationStep.DOWNLOADING)
        # One snapshot so the downloaded version and the marker agree
        config = self.config_source()
        version = self._target_version(config)
        url = validate_download_url(self._download_url(config))

        try:
            folders = self.folder_provider()
        except Exception as e:
            raise DownloadError(f"Could not resolve install directory: {e}", url=url) from e

        logger.info(f"Downloading language server v{version} from {url}")
        download = loop.run_in_executor(
            None, download_archive, url, self.download_timeout
        )
        try:
            downloaded = await asyncio.shield(download)
        except asyncio.CancelledError:
            # The worker thread keeps going; drop its file once it lands
            download.add_done_callback(_discard_download)
            raise

        archive_path = folders.archive_path
        try:
            try:
                await loop.run_in_executor(None, shutil.copyfile, downloaded, archive_path)
            except OSError as e:
                raise CopyError(f"Failed to copy archive to {archive_path}: {e}") from e
            finally:
                _remove_quietly(downloaded)

            emit(InstallationStep.UNINSTALLING)
            await self.uninstall()

            emit(InstallationStep.DECOMPRESSING)
            await self._decompress(archive_path)
        finally:
            _remove_quietly(archive_path)

        binary_path = folders.binary_path
        try:
            os.chmod(binary_path, EXECUTABLE_MODE)
        except OSError as e:
            raise PermissionFailureError(
                f"Failed to make {binary_path} executable: {e}"
            ) from e

        try:
            folders.version_file_path.write_bytes(version.encode("utf-8"))
        except OSError as e:
            raise PersistError(f"Failed to write version marker: {e}") from e

        logger.info(f"Installed language server v{version}")
        emit(InstallationStep.DONE)

    async def _decompress(self, archive_path: Path) -> None:
        try:
            await self.terminal.run_command(
                DECOMPRESS_COMMAND,
                arguments=["-f", str(archive_path)],
                environment={},
            )
        except TerminalError as e:
            raise DecompressionError(
                f"Failed to decompress {archive_path}: {e}",
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e
        except Exception as e:
            raise DecompressionError(f"Failed to decompress {archive_path}: {e}") from e

    # -------------------------------------------------------------------------
    # Uninstall
    # -------------------------------------------------------------------------

    async def uninstall(self) -> None:
        """
        Remove the language server binary and its version marker.

        Idempotent. Does nothing if the install directory cannot be
        resolved. Not guarded against a concurrent install; do not call
        while an install is running.

        Raises:
            RemovalError: If an existing file cannot be removed
        """
        try:
            folders = self.folder_provider()
        except Exception as e:
            logger.debug(f"Could not resolve install directory: {e}")
            return

        for path in (folders.binary_path, folders.version_file_path):
            if not path.exists():
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise RemovalError(f"Failed to remove {path}: {e}", path=str(path)) from e
            logger.debug(f"Removed {path}")


def _discard_download(future: "asyncio.Future[Path]") -> None:
    if future.cancelled() or future.exception() is not None:
        return
    _remove_quietly(future.result())


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Could not remove {path}: {e}")
