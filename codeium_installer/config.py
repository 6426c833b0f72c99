"""
Deployment mode configuration for codeium-installer.

Enterprise mode is active only when the enterprise flag is set AND both a
portal URL and an enterprise version are present. Anything less falls back
to community mode, regardless of the flag.

Environment Variables:
    CODEIUM_ENTERPRISE_MODE: Enable enterprise mode (1/true/yes/on)
    CODEIUM_PORTAL_URL: Enterprise portal base URL
    CODEIUM_ENTERPRISE_VERSION: Language server version served by the portal
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

ENV_ENTERPRISE_MODE = "CODEIUM_ENTERPRISE_MODE"
ENV_PORTAL_URL = "CODEIUM_PORTAL_URL"
ENV_ENTERPRISE_VERSION = "CODEIUM_ENTERPRISE_VERSION"

_TRUTHY = ("1", "true", "yes", "on")


def _parse_flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class ModeConfig:
    """
    Snapshot of the three values that select the deployment mode.

    Attributes:
        enterprise_mode: Enterprise flag as configured by the user
        portal_url: Enterprise portal base URL
        enterprise_version: Language server version the portal serves
    """
    enterprise_mode: bool = False
    portal_url: str = ""
    enterprise_version: str = ""

    @property
    def is_enterprise(self) -> bool:
        """Check if enterprise mode is fully configured."""
        return bool(self.enterprise_mode) and bool(self.portal_url) and bool(self.enterprise_version)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ModeConfig":
        """
        Read the mode configuration from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            ModeConfig snapshot
        """
        env = os.environ if environ is None else environ
        return cls(
            enterprise_mode=_parse_flag(env.get(ENV_ENTERPRISE_MODE)),
            portal_url=env.get(ENV_PORTAL_URL, "").strip(),
            enterprise_version=env.get(ENV_ENTERPRISE_VERSION, "").strip(),
        )


# Zero-argument callable polled once per operation
ConfigSource = Callable[[], ModeConfig]
