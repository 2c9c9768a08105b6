"""
Report payload assembly.

Runs the registered collectors and serializes their fields into the report
document, and defines the fixed opt-out document sent instead of it.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from sysreport.collectors import BaseCollector, get_all_collectors
from sysreport.errors import CollectionError

logger = logging.getLogger(__name__)

# Field every real report carries
REPORT_MARKER_FIELD = "Version"
EXPECTED_REPORT_ITEM = f'"{REPORT_MARKER_FIELD}":'

OPT_OUT_JSON = '{"OptOut": true}'
OPT_OUT_PAYLOAD = OPT_OUT_JSON.encode("utf-8")


def _sort_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _sort_keys(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_sort_keys(item) for item in value]
    return value


def collect_metrics(
    collectors: dict[str, type[BaseCollector]] | None = None,
) -> bytes:
    """
    Collect the report for this machine.

    Args:
        collectors: Collector classes to run. Defaults to all registered ones.

    Returns:
        The report as UTF-8 encoded JSON.

    Raises:
        CollectionError: If the report cannot be built or lacks the marker field.
    """
    collectors = get_all_collectors() if collectors is None else collectors
    fields: dict[str, Any] = {}

    logger.info(f"Running {len(collectors)} collectors")

    for name, collector_cls in collectors.items():
        start = time.perf_counter()
        try:
            data = collector_cls().collect()
        except Exception as e:
            logger.error(f"Collector '{name}' failed: {e}")
            continue
        duration = (time.perf_counter() - start) * 1000
        logger.debug(f"Collector '{name}' completed in {duration:.2f}ms")
        fields.update(_sort_keys(data))

    if REPORT_MARKER_FIELD not in fields:
        raise CollectionError(f"Collected report has no '{REPORT_MARKER_FIELD}' field")

    try:
        return json.dumps(fields, indent=2).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise CollectionError(f"Collected report cannot be serialized: {e}") from e
