"""
Base collector class that all collectors inherit from.

Collectors probe the machine through small sysfs/procfs reads and one-shot
commands. Every probe degrades to an empty result: a field that cannot be
determined is left out of the report rather than failing the run.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any

PROBE_TIMEOUT = 5


class BaseCollector(ABC):
    """
    Abstract base class for all report collectors.

    Subclasses implement `collect` and return the top-level report fields
    they are responsible for.
    """

    name: str = "base"
    description: str = "Base collector"

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @abstractmethod
    def collect(self) -> dict[str, Any]:
        """
        Collect and return report fields.

        Returns:
            Mapping of report field name to value. Fields that could not
            be determined are left out.
        """

    def probe(self, *cmd: str, timeout: float = PROBE_TIMEOUT) -> str | None:
        """
        Run a one-shot command such as ``lspci`` and return its output.

        Returns:
            The stripped standard output, or None if the command is missing,
            times out or exits non-zero.
        """
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError:
            self.logger.debug(f"{cmd[0]} is not installed")
            return None
        except subprocess.TimeoutExpired:
            self.logger.warning(f"{cmd[0]} did not answer within {timeout}s")
            return None

        if result.returncode != 0:
            self.logger.debug(f"{cmd[0]} exited with {result.returncode}: {result.stderr.strip()}")
            return None
        return result.stdout.strip()

    def read_value(self, path: str) -> str:
        """Read a single-value file (sysfs attribute, /etc/timezone), stripped."""
        try:
            with open(path) as f:
                return f.read().strip()
        except OSError as e:
            self.logger.debug(f"Could not read {path}: {e}")
            return ""

    def read_lines(self, path: str) -> list[str]:
        value = self.read_value(path)
        return value.splitlines() if value else []

    def read_settings(self, path: str, separator: str = "=") -> dict[str, str]:
        """
        Read a ``key=value`` settings file.

        Handles os-release style quoting and INI style files such as the
        display manager's ``custom.conf``. Section headers and comments are
        skipped; a key repeated in a later section wins.
        """
        settings = {}
        for line in self.read_lines(path):
            line = line.strip()
            if not line or line[0] in "#;[" or separator not in line:
                continue
            key, _, value = line.partition(separator)
            settings[key.strip()] = value.strip().strip("\"'")
        return settings
