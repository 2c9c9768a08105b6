"""
Report collectors for Sysreport.

Each collector contributes a group of top-level fields to the report.
"""

from __future__ import annotations

from sysreport.collectors.base import BaseCollector
from sysreport.collectors.hardware import HardwareCollector
from sysreport.collectors.session import SessionCollector
from sysreport.collectors.system import SystemCollector

# Registry of all available collectors, in report order
COLLECTORS: dict[str, type[BaseCollector]] = {
    "system": SystemCollector,
    "hardware": HardwareCollector,
    "session": SessionCollector,
}


def get_all_collectors() -> dict[str, type[BaseCollector]]:
    """Return all registered collectors."""
    return COLLECTORS.copy()


def get_collector(name: str) -> type[BaseCollector] | None:
    """Get a specific collector by name."""
    return COLLECTORS.get(name)


def list_collectors() -> list[str]:
    """List all available collector names."""
    return list(COLLECTORS.keys())


__all__ = [
    "BaseCollector",
    "SystemCollector",
    "HardwareCollector",
    "SessionCollector",
    "get_all_collectors",
    "get_collector",
    "list_collectors",
    "COLLECTORS",
]
