"""
Run identity for Sysreport.

Determines where the per-user report cache lives and which name the report
file carries for the running distribution release.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping

import distro

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


def get_report_name() -> str:
    """
    Get the report file name for this machine.

    The name embeds the distribution and its release so that an upgrade to
    a new release produces a fresh report slot.

    Returns:
        A name such as ``ubuntu.22.04``.
    """
    distro_id = distro.id() or UNKNOWN
    version_id = distro.version() or UNKNOWN
    name = f"{distro_id}.{version_id}"
    logger.debug(f"Using report name {name}")
    return name


def resolve_cache_root(env: Mapping[str, str] | None = None) -> Path:
    """
    Determine the per-user cache root.

    Args:
        env: Environment to inspect. Defaults to ``os.environ``.

    Returns:
        ``XDG_CACHE_HOME`` when set, otherwise the platform cache directory.
    """
    env = os.environ if env is None else env

    xdg = env.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg)

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    if sys.platform == "win32":
        local = env.get("LOCALAPPDATA")
        if local:
            return Path(local)
        return Path.home() / "AppData" / "Local"

    return Path.home() / ".cache"
