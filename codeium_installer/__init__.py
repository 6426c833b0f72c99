"""
codeium-installer: Install and update the Codeium language server binary.

This package provides:
- Installation status checks against the supported language server version
- A single-flight async install pipeline with progress reporting
- Community (GitHub releases) and enterprise (portal) download modes

Installation:
    pip install codeium-installer

Quickstart:
    from codeium_installer import InstallationManager, Outdated

    manager = InstallationManager()
    status = manager.check_installation()
    if status.needs_install:
        async for step in manager.install_latest_version():
            print(f"Install step: {step.value}")

Enterprise mode (all three must be set):
    CODEIUM_ENTERPRISE_MODE=1
    CODEIUM_PORTAL_URL=https://codeium.example.com/download
    CODEIUM_ENTERPRISE_VERSION=1.9.2
"""

from codeium_installer.types import (
    Ordering,
    InstallationStep,
    InstallationStatus,
    InstallationStatusKind,
    NotInstalled,
    Installed,
    Outdated,
    Unsupported,
    UNKNOWN_VERSION,
)
from codeium_installer.errors import (
    CodeiumInstallerError,
    AlreadyInstallingError,
    InstallStepError,
    DownloadError,
    CopyError,
    DecompressionError,
    PermissionFailureError,
    PersistError,
    RemovalError,
    TerminalError,
)
from codeium_installer.config import ModeConfig
from codeium_installer._core.version import (
    INSTALLER_VERSION,
    LATEST_SUPPORTED_VERSION,
    compare_versions,
)
from codeium_installer._core.folders import ExecutableFolders
from codeium_installer._core.lifecycle import InstallGuard, InstallationStream
from codeium_installer._core.manager import InstallationManager

__version__ = INSTALLER_VERSION

__all__ = [
    # Version
    "__version__",
    "INSTALLER_VERSION",
    "LATEST_SUPPORTED_VERSION",
    "compare_versions",
    # Types
    "Ordering",
    "InstallationStep",
    "InstallationStatus",
    "InstallationStatusKind",
    "NotInstalled",
    "Installed",
    "Outdated",
    "Unsupported",
    "UNKNOWN_VERSION",
    # Errors
    "CodeiumInstallerError",
    "AlreadyInstallingError",
    "InstallStepError",
    "DownloadError",
    "CopyError",
    "DecompressionError",
    "PermissionFailureError",
    "PersistError",
    "RemovalError",
    "TerminalError",
    # Configuration
    "ModeConfig",
    "ExecutableFolders",
    # Install
    "InstallGuard",
    "InstallationStream",
    "InstallationManager",
]
