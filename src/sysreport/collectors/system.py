"""
System information collector.

Reports the distribution release, architecture and kernel.
"""

from __future__ import annotations

import platform
from typing import Any

import distro

from sysreport.collectors.base import BaseCollector


class SystemCollector(BaseCollector):
    """Collects distribution and kernel information."""

    name = "system"
    description = "Distribution release, architecture and kernel"

    def collect(self) -> dict[str, Any]:
        """Collect system information."""
        data: dict[str, Any] = {
            "Version": distro.version() or platform.release(),
            "Distro": {
                "ID": distro.id(),
                "Name": distro.name(pretty=True),
                "Codename": distro.codename(),
            },
            "Arch": self._get_arch(),
            "Kernel": platform.release(),
        }
        return data

    def _get_arch(self) -> str:
        """Get the package architecture, falling back to the machine type."""
        return self.probe("dpkg", "--print-architecture") or platform.machine()
