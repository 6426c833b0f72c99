"""
Core installation machinery for codeium-installer.

This module handles:
- Version constants, numeric version comparison and download URLs
- Install directory provisioning and external command execution
- The single-flight install pipeline and its progress stream
"""

from codeium_installer._core.version import (
    INSTALLER_VERSION,
    LATEST_SUPPORTED_VERSION,
    compare_versions,
    get_download_url,
    get_enterprise_download_url,
)
from codeium_installer._core.folders import (
    ExecutableFolders,
    create_folders_if_needed,
)
from codeium_installer._core.terminal import Terminal, CommandResult
from codeium_installer._core.lifecycle import (
    InstallGuard,
    InstallationStream,
    get_arch_name,
)
from codeium_installer._core.manager import InstallationManager

__all__ = [
    # Version
    "INSTALLER_VERSION",
    "LATEST_SUPPORTED_VERSION",
    "compare_versions",
    "get_download_url",
    "get_enterprise_download_url",
    # Collaborators
    "ExecutableFolders",
    "create_folders_if_needed",
    "Terminal",
    "CommandResult",
    # Lifecycle
    "InstallGuard",
    "InstallationStream",
    "get_arch_name",
    # Manager
    "InstallationManager",
]
