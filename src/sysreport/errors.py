"""
Exceptions raised while building and sending a report.
"""

from __future__ import annotations

from pathlib import Path


class ReportError(Exception):
    """Base class for report lifecycle failures."""


class DuplicateReportError(ReportError):
    """Raised when a report was already recorded and force was not requested."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        super().__init__(
            f"A report has already been recorded in {self.path}. Use force to send it again."
        )


class CollectionError(ReportError):
    """Raised when machine information could not be collected."""


class CacheWriteError(ReportError):
    """Raised when the report could not be saved locally."""


class SendError(ReportError):
    """Raised when the report could not be delivered to the endpoint."""
