"""
Exception types for codeium-installer.

Errors fall into two lanes:
- Query lane (installation check, uninstall folder resolution) never raises;
  failures degrade to a conservative status or a no-op.
- Mutation lane (install pipeline, file removal) raises the typed errors below.
"""

from __future__ import annotations

from typing import Optional


class CodeiumInstallerError(Exception):
    """Base exception for all codeium-installer errors."""
    pass


# =============================================================================
# Install Pipeline Errors
# =============================================================================


class AlreadyInstallingError(CodeiumInstallerError):
    """
    Raised when an install is requested while another one is in flight.

    The rejected install emits no progress steps.
    """

    def __init__(self, message: str = "Language server is already being installed"):
        super().__init__(message)


class InstallStepError(CodeiumInstallerError):
    """
    Base class for failures of a single install pipeline step.

    A step failure aborts the remaining steps. The installation is not
    atomic: whatever the completed steps did to disk is left in place.
    """
    pass


class DownloadError(InstallStepError):
    """
    Raised when the language server archive cannot be downloaded.

    This includes:
    - Malformed download URLs
    - Network and HTTP errors
    - Install directory resolution failures
    """

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class CopyError(InstallStepError):
    """Raised when the downloaded archive cannot be copied into the install directory."""
    pass


class DecompressionError(InstallStepError):
    """
    Raised when the archive cannot be decompressed.

    Covers both a decompression command that could not be launched and one
    that exited with a non-zero status.
    """

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class PermissionFailureError(InstallStepError):
    """Raised when the installed binary cannot be made executable."""
    pass


class PersistError(InstallStepError):
    """Raised when the version marker file cannot be written."""
    pass


# =============================================================================
# Uninstall Errors
# =============================================================================


class RemovalError(CodeiumInstallerError):
    """Raised when an installed file exists but cannot be removed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


# =============================================================================
# External Command Errors
# =============================================================================


class TerminalError(CodeiumInstallerError):
    """
    Raised when an external command fails to launch or exits non-zero.

    Attributes:
        command: The executable that was invoked
        returncode: Exit status, or None if the process never started
        stderr: Captured standard error output
    """

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"TerminalError(command={self.command!r}, "
            f"returncode={self.returncode!r}, stderr={self.stderr!r})"
        )
