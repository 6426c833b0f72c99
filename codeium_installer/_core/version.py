"""
Version constants and comparison for codeium-installer.

- LATEST_SUPPORTED_VERSION: Language server version installed in community mode
- INSTALLER_VERSION: This package's own version
"""

from __future__ import annotations

import re
from typing import List

from codeium_installer.types import Ordering

# codeium-installer version (user-facing)
INSTALLER_VERSION = "0.1.0"

# Language server version this build knows how to drive
LATEST_SUPPORTED_VERSION = "1.8.5"

# GitHub repository for community downloads
GITHUB_REPO = "Exafunction/codeium"

# On-disk names inside the executable directory
BINARY_NAME = "language_server"
VERSION_FILE_NAME = "version"
ARCHIVE_EXTENSION = ".gz"
ARCHIVE_NAME = BINARY_NAME + ARCHIVE_EXTENSION

_LEADING_DIGITS = re.compile(r"^\d+")


def _segment_value(segment: str) -> int:
    match = _LEADING_DIGITS.match(segment.strip())
    return int(match.group(0)) if match else 0


def parse_segments(version: str) -> List[int]:
    """
    Split a version string into its numeric segments.

    Each dot-separated segment contributes the value of its leading digits,
    or 0 if it has none. Never raises.

    Args:
        version: Version string like "1.8.5"

    Returns:
        List of integers, e.g. [1, 8, 5]
    """
    return [_segment_value(part) for part in version.strip().split(".")]


def compare_versions(a: str, b: str) -> Ordering:
    """
    Compare two version strings numerically.

    Segments are compared as integers from left to right, with the shorter
    version padded with zeros, so "1.10.0" is newer than "1.9.0" and
    "1.8.5" is the same as "1.8.5.0".

    Args:
        a: First version
        b: Second version

    Returns:
        Ordering of ``a`` relative to ``b``
    """
    left = parse_segments(a)
    right = parse_segments(b)
    width = max(len(left), len(right))
    left += [0] * (width - len(left))
    right += [0] * (width - len(right))

    if left < right:
        return Ordering.OLDER
    if left > right:
        return Ordering.NEWER
    return Ordering.SAME


def get_archive_filename(arch_name: str) -> str:
    """Get the release asset name for an architecture ("arm" or "x64")."""
    return f"language_server_macos_{arch_name}{ARCHIVE_EXTENSION}"


def get_download_url(version: str, arch_name: str) -> str:
    """
    Get the community download URL for a language server version.

    Args:
        version: Language server version (e.g., "1.8.5")
        arch_name: Architecture family ("arm" or "x64")

    Returns:
        GitHub release download URL
    """
    filename = get_archive_filename(arch_name)
    return (
        f"https://github.com/{GITHUB_REPO}/releases/download/"
        f"language-server-v{version}/{filename}"
    )


def get_enterprise_download_url(portal_url: str, version: str, arch_name: str) -> str:
    """
    Get the enterprise portal download URL for a language server version.

    Args:
        portal_url: Enterprise portal base URL
        version: Enterprise language server version
        arch_name: Architecture family ("arm" or "x64")

    Returns:
        Portal download URL
    """
    filename = get_archive_filename(arch_name)
    return f"{portal_url.rstrip('/')}/language-server-v{version}/{filename}"
