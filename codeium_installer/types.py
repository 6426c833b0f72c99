"""
Type definitions for codeium-installer.

Defines enums and dataclasses used across the package for:
- Installation status reported by check_installation
- Progress steps emitted by the install pipeline
- Version ordering
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# =============================================================================
# Version Ordering
# =============================================================================


class Ordering(str, Enum):
    """
    Result of comparing two version strings.

    Read as "the first version is OLDER/SAME/NEWER than the second".
    """
    OLDER = "older"
    SAME = "same"
    NEWER = "newer"


# =============================================================================
# Install Pipeline Progress
# =============================================================================


class InstallationStep(str, Enum):
    """
    Progress event emitted by the install pipeline.

    A successful install emits every step exactly once, in declaration
    order. DONE is always last.
    """
    DOWNLOADING = "downloading"
    UNINSTALLING = "uninstalling"
    DECOMPRESSING = "decompressing"
    DONE = "done"


# =============================================================================
# Installation Status
# =============================================================================


class InstallationStatusKind(str, Enum):
    """Discriminator for InstallationStatus variants."""
    NOT_INSTALLED = "not_installed"
    INSTALLED = "installed"
    OUTDATED = "outdated"
    UNSUPPORTED = "unsupported"


UNKNOWN_VERSION = "Unknown"


@dataclass(frozen=True)
class InstallationStatus:
    """
    Base for the installation status variants.

    Use isinstance checks or the ``kind`` attribute to branch:

        status = manager.check_installation()
        if isinstance(status, Outdated):
            print(f"Update {status.current} -> {status.latest}")
    """
    kind: InstallationStatusKind = field(init=False)

    @property
    def needs_install(self) -> bool:
        """Whether running the install pipeline would change anything."""
        return self.kind in (
            InstallationStatusKind.NOT_INSTALLED,
            InstallationStatusKind.OUTDATED,
        )


@dataclass(frozen=True)
class NotInstalled(InstallationStatus):
    """The language server executable is not present."""
    kind: InstallationStatusKind = field(
        init=False, default=InstallationStatusKind.NOT_INSTALLED
    )


@dataclass(frozen=True)
class Installed(InstallationStatus):
    """The installed version matches the target version."""
    version: str
    kind: InstallationStatusKind = field(
        init=False, default=InstallationStatusKind.INSTALLED
    )


@dataclass(frozen=True)
class Outdated(InstallationStatus):
    """
    The installed version is older than the target version.

    ``current`` is UNKNOWN_VERSION when the executable exists but the
    version marker is missing or unreadable.
    """
    current: str
    latest: str
    kind: InstallationStatusKind = field(
        init=False, default=InstallationStatusKind.OUTDATED
    )


@dataclass(frozen=True)
class Unsupported(InstallationStatus):
    """The installed version is newer than this build knows how to support."""
    current: str
    latest: str
    kind: InstallationStatusKind = field(
        init=False, default=InstallationStatusKind.UNSUPPORTED
    )

