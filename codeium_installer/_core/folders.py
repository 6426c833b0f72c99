"""
Install directory provisioning for the language server.

Environment Variables:
    CODEIUM_INSTALL_DIR: Base directory to use instead of the user data dir
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from platformdirs import user_data_dir

from codeium_installer._core.version import (
    ARCHIVE_NAME,
    BINARY_NAME,
    VERSION_FILE_NAME,
)

logger = logging.getLogger(__name__)

ENV_INSTALL_DIR = "CODEIUM_INSTALL_DIR"


@dataclass(frozen=True)
class ExecutableFolders:
    """Directories provisioned for the language server."""
    executable_dir: Path

    @property
    def binary_path(self) -> Path:
        return self.executable_dir / BINARY_NAME

    @property
    def version_file_path(self) -> Path:
        return self.executable_dir / VERSION_FILE_NAME

    @property
    def archive_path(self) -> Path:
        return self.executable_dir / ARCHIVE_NAME


def get_base_dir() -> Path:
    """Get the base directory that holds everything codeium-installer writes."""
    override = os.environ.get(ENV_INSTALL_DIR)
    if override:
        return Path(override).expanduser()
    return Path(user_data_dir("codeium-installer", "codeium"))


def create_folders_if_needed() -> ExecutableFolders:
    """
    Resolve and create the install directories.

    Safe to call repeatedly; existing directories are left alone.

    Returns:
        ExecutableFolders for the language server

    Raises:
        OSError: If the directories cannot be created
    """
    executable_dir = get_base_dir() / "executable"
    executable_dir.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Using executable directory {executable_dir}")
    return ExecutableFolders(executable_dir=executable_dir)


# Zero-argument callable returning the install directories
FolderProvider = Callable[[], ExecutableFolders]
