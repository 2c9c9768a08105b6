"""
Local report cache for Sysreport.

Keeps the last report decided on this machine in a single file under the
per-user cache directory. The presence of that file is what prevents the
same report from being sent twice.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from sysreport.errors import CacheWriteError
from sysreport.identity import get_report_name, resolve_cache_root

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "sysreport"


class CacheStore:
    """
    Single-slot report persistence.

    The file lives at ``<cache_root>/<namespace>/<report_name>``.
    """

    def __init__(
        self,
        cache_root: str | Path | None = None,
        namespace: str = DEFAULT_NAMESPACE,
        report_name: str | None = None,
    ):
        self.cache_root = Path(cache_root) if cache_root else resolve_cache_root()
        self.namespace = namespace
        self.report_name = report_name or get_report_name()

    @property
    def directory(self) -> Path:
        return self.cache_root / self.namespace

    @property
    def path(self) -> Path:
        return self.directory / self.report_name

    def exists(self) -> bool:
        """Return True if a report was already recorded, whatever its content."""
        return self.path.is_file()

    def read(self) -> bytes:
        """Return the recorded report bytes."""
        return self.path.read_bytes()

    def write(self, data: bytes) -> None:
        """
        Record a report.

        The data is written to a temporary file in the same directory and
        renamed over the previous record, so a crash never leaves a
        half-written report behind.

        Raises:
            CacheWriteError: If the directory or file cannot be written.
        """
        tmp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.report_name}.", dir=self.directory)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise CacheWriteError(f"Could not save report to {self.path}: {e}") from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

        logger.info(f"Report saved to {self.path}")

    def clear(self) -> bool:
        """
        Remove the recorded report.

        Returns:
            True if a report file was removed.
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Removed report {self.path}")
        return True
