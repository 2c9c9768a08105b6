"""
Pytest fixtures and configuration for Sysreport tests.

Provides fake collaborators for the report orchestrator, isolated cache
directories and HTTP response mocks shared across the test suite.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from sysreport.cache import CacheStore
from sysreport.config import Config

SAMPLE_REPORT = {
    "Version": "22.04",
    "Distro": {"ID": "ubuntu", "Name": "Ubuntu 22.04.3 LTS", "Codename": "jammy"},
    "Arch": "amd64",
    "OEM": {"Vendor": "Dell Inc.", "Product": "XPS 13 9380"},
    "RAM": 15.5,
}


class RecordingSender:
    """Sender double that records every call."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[str, bytes]] = []
        self.error = error

    def __call__(self, url: str, data: bytes) -> None:
        self.calls.append((url, data))
        if self.error is not None:
            raise self.error

    @property
    def hit(self) -> bool:
        return bool(self.calls)


# Report Fixtures
@pytest.fixture
def sample_report_bytes():
    """Serialized sample report as produced by the collectors."""
    return json.dumps(SAMPLE_REPORT, indent=2).encode("utf-8")


@pytest.fixture
def fake_collector(sample_report_bytes):
    """Collector double returning the sample report."""
    return MagicMock(return_value=sample_report_bytes)


@pytest.fixture
def sender():
    """Sender double that always succeeds."""
    return RecordingSender()


@pytest.fixture
def make_sender():
    """Factory for sender doubles, optionally failing with an error."""
    return RecordingSender


# Cache Fixtures
@pytest.fixture
def cache_root(tmp_path):
    """Isolated per-test cache root."""
    return tmp_path / "cache"


@pytest.fixture
def store(cache_root):
    """Cache store with a fixed report name."""
    return CacheStore(cache_root, report_name="ubuntu.22.04")


@pytest.fixture
def sample_config(cache_root):
    """Configuration pointing at a test server and an isolated cache."""
    return Config(
        upload_url="https://test.example.com/report",
        upload_timeout=5,
        upload_retries=1,
        cache_dir=str(cache_root),
    )


# HTTP Response Fixtures
@pytest.fixture
def mock_response_ok():
    """Successful HTTP response."""
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.text = '{"status": "ok"}'
    return response


@pytest.fixture
def mock_response_server_error():
    """HTTP 500 response."""
    response = MagicMock()
    response.ok = False
    response.status_code = 500
    response.text = '{"error": "Internal server error"}'
    return response


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(
        """
upload:
  url: "https://test.example.com/report"
  timeout: 10
cache:
  dir: "%s"
log:
  level: WARNING
"""
        % (tmp_path / "cache")
    )
    return config_file


# Pytest Configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "cli: marks tests as CLI tests")
