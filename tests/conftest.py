"""
Pytest configuration for codeium-installer tests.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from codeium_installer._core.folders import ExecutableFolders
from codeium_installer._core.lifecycle import InstallGuard
from codeium_installer._core.manager import InstallationManager
from codeium_installer._core.terminal import CommandResult
from codeium_installer.config import ModeConfig
from codeium_installer.errors import TerminalError

# Note: With pytest-asyncio in auto mode, no event_loop fixture needed


class FakeTerminal:
    """Stands in for gunzip: turns <name>.gz into an executable-less <name>."""

    def __init__(self, returncode: int = 0, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        self.calls: List[tuple] = []

    async def run_command(
        self,
        command: str,
        arguments: Optional[List[str]] = None,
        environment: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        self.calls.append((command, list(arguments or []), environment))
        if self.returncode != 0:
            raise TerminalError(
                f"{command} exited with code {self.returncode}",
                command=command,
                returncode=self.returncode,
                stderr=self.stderr,
            )
        archive = Path(arguments[-1])
        with open(archive.with_suffix(""), "wb") as f:
            f.write(b"#!/bin/sh\necho language server\n")
        archive.unlink()
        return CommandResult(returncode=0)


@pytest.fixture
def executable_dir(tmp_path):
    """Empty install directory."""
    path = tmp_path / "executable"
    path.mkdir()
    return path


@pytest.fixture
def folders(executable_dir):
    return ExecutableFolders(executable_dir=executable_dir)


@pytest.fixture
def community_config():
    return ModeConfig()


@pytest.fixture
def enterprise_config():
    return ModeConfig(
        enterprise_mode=True,
        portal_url="https://codeium.example.com/download",
        enterprise_version="1.9.2",
    )


@pytest.fixture
def fake_terminal():
    return FakeTerminal()


@pytest.fixture
def failing_terminal():
    """Decompression that exits non-zero."""
    return FakeTerminal(returncode=1, stderr="not in gzip format")


@pytest.fixture
def make_manager(folders, community_config, fake_terminal):
    """Build an InstallationManager with its own guard and a temp install dir."""

    def _make(config=None, folder_provider=None, terminal=None, guard=None):
        effective_config = config or community_config
        return InstallationManager(
            config_source=lambda: effective_config,
            folder_provider=folder_provider or (lambda: folders),
            terminal=terminal or fake_terminal,
            guard=guard or InstallGuard(),
        )

    return _make


@pytest.fixture
def install_binary(folders):
    """Write a fake binary and, optionally, a version marker."""

    def _install(version: Optional[str] = None):
        folders.binary_path.write_bytes(b"binary")
        if version is not None:
            folders.version_file_path.write_text(version, encoding="utf-8")

    return _install
