"""
Report uploader for Sysreport.

Handles transmission of the decided report to the collection endpoint.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests

from sysreport.errors import SendError

if TYPE_CHECKING:
    from sysreport.config import Config

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Result of an upload operation."""

    success: bool
    status_code: int | None = None
    error: str | None = None
    attempts: int = 1
    duration_ms: float = 0.0


class Uploader:
    """
    Sends report payloads to a remote server with HTTP POST.

    Failed attempts are retried with exponential backoff when
    ``upload_retries`` allows more than one attempt.
    """

    def __init__(self, config: Config):
        self.config = config
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": f"sysreport/{self._get_version()}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    def send(self, url: str, data: bytes) -> UploadResult:
        """
        Send a payload to the server.

        Args:
            url: Endpoint to POST to.
            data: Payload bytes, sent unchanged.

        Returns:
            The successful upload result.

        Raises:
            ValueError: If no URL is given.
            SendError: If the upload fails after all attempts.
        """
        if not url:
            raise ValueError("No upload URL configured")

        result = self._send_with_retry(url, data)
        if not result.success:
            raise SendError(f"Upload to {url} failed after {result.attempts} attempts: {result.error}")

        return result

    def _send_with_retry(self, url: str, data: bytes) -> UploadResult:
        """Upload with exponential backoff retry logic."""
        attempts = max(self.config.upload_retries, 1)
        last_error = None

        for attempt in range(1, attempts + 1):
            start_time = time.perf_counter()

            try:
                response = self.session.post(
                    url,
                    data=data,
                    timeout=self.config.upload_timeout,
                )

                duration = (time.perf_counter() - start_time) * 1000

                if response.ok:
                    logger.info(
                        f"Upload successful in {duration:.0f}ms (attempt {attempt}/{attempts})"
                    )
                    return UploadResult(
                        success=True,
                        status_code=response.status_code,
                        attempts=attempt,
                        duration_ms=duration,
                    )

                # Client errors are not retried
                if 400 <= response.status_code < 500:
                    return UploadResult(
                        success=False,
                        status_code=response.status_code,
                        error=f"HTTP {response.status_code}: {response.text[:200]}",
                        attempts=attempt,
                        duration_ms=duration,
                    )

                last_error = f"HTTP {response.status_code}: {response.text[:200]}"
                logger.warning(f"Upload attempt {attempt} failed: {last_error}")

            except requests.exceptions.Timeout:
                last_error = "Request timed out"
                logger.warning(f"Upload attempt {attempt} timed out")

            except requests.exceptions.ConnectionError as e:
                last_error = f"Connection error: {e}"
                logger.warning(f"Upload attempt {attempt} connection error: {e}")

            except requests.exceptions.RequestException as e:
                last_error = f"Request error: {e}"
                logger.warning(f"Upload attempt {attempt} error: {e}")

            if attempt < attempts:
                backoff = min(2**attempt, 30)
                logger.debug(f"Retrying in {backoff} seconds...")
                time.sleep(backoff)

        return UploadResult(
            success=False,
            error=last_error,
            attempts=attempts,
        )

    def test_connection(self, url: str | None = None) -> bool:
        """
        Test connection to the upload server.

        Returns:
            True if server is reachable, False otherwise.
        """
        url = url or self.config.upload_url
        if not url:
            return False

        try:
            response = self.session.head(url, timeout=10, allow_redirects=True)
            return bool(response.status_code < 500)
        except requests.exceptions.RequestException:
            return False

    def _get_version(self) -> str:
        from sysreport import __version__

        return __version__
