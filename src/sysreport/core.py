"""
Core orchestration module for Sysreport.

Decides, for a run mode and force flag, whether a report is collected,
whether the user is asked, what gets recorded locally and what gets sent.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Callable

from sysreport.cache import CacheStore
from sysreport.config import Config
from sysreport.errors import CollectionError, DuplicateReportError
from sysreport.metrics import OPT_OUT_PAYLOAD, collect_metrics
from sysreport.prompt import Decision, ask
from sysreport.uploader import Uploader

logger = logging.getLogger(__name__)

Collector = Callable[[], bytes]
Sender = Callable[[str, bytes], Any]


class ReportMode(enum.Enum):
    """How the report decision is made."""

    AUTO = "auto"
    OPT_OUT = "opt-out"
    INTERACTIVE = "interactive"


@dataclass
class ReportResult:
    """Outcome of a report run."""

    mode: ReportMode
    decision: Decision
    payload: bytes | None
    sent: bool
    path: Path

    @property
    def aborted(self) -> bool:
        return self.decision is Decision.ABORT


class ReportCore:
    """
    Main orchestrator for the report lifecycle.

    Collaborators are passed in explicitly; anything left out is built from
    the configuration.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        collector: Collector | None = None,
        sender: Sender | None = None,
        store: CacheStore | None = None,
        stdin: IO[str] | None = None,
        stdout: IO[str] | None = None,
    ):
        self.config = config or Config()
        self.collector = collector or collect_metrics
        self.store = store or CacheStore(self.config.cache_root(), self.config.namespace)
        self._sender = sender
        self._stdin = stdin
        self._stdout = stdout

    @property
    def sender(self) -> Sender:
        if self._sender is None:
            self._sender = Uploader(self.config).send
        return self._sender

    @property
    def stdin(self) -> IO[str]:
        return self._stdin or sys.stdin

    @property
    def stdout(self) -> IO[str]:
        return self._stdout or sys.stdout

    def collect(self) -> bytes:
        """
        Collect the full report without recording or sending it.

        Raises:
            CollectionError: If the collector fails.
        """
        try:
            return self.collector()
        except CollectionError:
            raise
        except Exception as e:
            raise CollectionError(f"Collection failed: {e}") from e

    def collect_and_send(
        self,
        mode: ReportMode,
        force: bool = False,
        url: str | None = None,
    ) -> ReportResult:
        """
        Collect, decide, record and send a report.

        Args:
            mode: How the decision is made.
            force: Send again even if a report was already recorded.
            url: Endpoint override. Defaults to the configured upload URL.

        Returns:
            The run outcome. An aborted interactive run records and sends
            nothing and is not an error.

        Raises:
            ValueError: If no upload URL is available.
            DuplicateReportError: If a report exists and force is not set.
            CollectionError: If the report cannot be collected when needed.
            CacheWriteError: If the report cannot be recorded locally.
            SendError: If the recorded report cannot be delivered.
        """
        url = url or self.config.upload_url
        if not url:
            raise ValueError("No upload URL configured. Set 'upload_url' in config.")

        if self.store.exists():
            if not force:
                raise DuplicateReportError(self.store.path)
            logger.info(f"Report {self.store.path} exists, forcing a new one")

        decision, payload = self._decide(mode)

        if decision is Decision.ABORT:
            logger.info("Report cancelled, nothing recorded or sent")
            return ReportResult(mode, decision, None, False, self.store.path)

        self.store.write(payload)

        logger.info(f"Sending {'opt-out' if decision is Decision.DECLINE else 'full'} report to {url}")
        self.sender(url, payload)

        return ReportResult(mode, decision, payload, True, self.store.path)

    def send_decision(
        self,
        agree: bool,
        force: bool = False,
        url: str | None = None,
    ) -> ReportResult:
        """Record and send a decision taken outside of the interactive prompt."""
        mode = ReportMode.AUTO if agree else ReportMode.OPT_OUT
        return self.collect_and_send(mode, force=force, url=url)

    def _decide(self, mode: ReportMode) -> tuple[Decision, bytes]:
        """Resolve the decision and the payload that goes with it."""
        if mode is ReportMode.OPT_OUT:
            try:
                self.collector()
            except Exception as e:
                logger.warning(f"Collection failed, sending opt-out anyway: {e}")
            return Decision.DECLINE, OPT_OUT_PAYLOAD

        data = self.collect()

        if mode is ReportMode.AUTO:
            return Decision.AGREE, data

        try:
            self.stdout.write(data.decode("utf-8") + "\n")
            self.stdout.flush()
        except KeyboardInterrupt:
            logger.debug("Interrupted while showing the report")
            return Decision.ABORT, b""
        decision = ask(self.stdin, self.stdout)

        if decision is Decision.AGREE:
            return decision, data
        if decision is Decision.DECLINE:
            return decision, OPT_OUT_PAYLOAD
        return decision, b""


def collect_and_send(
    mode: ReportMode,
    force: bool = False,
    url: str | None = None,
    config: Config | None = None,
) -> ReportResult:
    """
    Convenience function to run a report with default collaborators.

    Args:
        mode: How the decision is made.
        force: Send again even if a report was already recorded.
        url: Endpoint override.
        config: Optional configuration. Loaded from defaults if not provided.

    Returns:
        The run outcome.
    """
    core = ReportCore(config or Config.load())
    return core.collect_and_send(mode, force=force, url=url)
