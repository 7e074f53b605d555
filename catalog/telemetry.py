"""Prometheus counters for template imports and launches."""
from __future__ import annotations

from collections import Counter
from typing import Dict

from prometheus_client import Counter as PrometheusCounter

_local_counts: Counter[str] = Counter()

_import_counter = PrometheusCounter(
    "adtemplate_import_rows_total",
    "CSV template rows processed, partitioned by outcome.",
    ["outcome"],
)
_launch_counter = PrometheusCounter(
    "adtemplate_launches_total",
    "Templates materialized for launch.",
)


def record_import_outcome(outcome: str, count: int = 1) -> None:
    """Count an import row outcome (``imported``, ``duplicate``, ``invalid`` or ``failed``)."""

    if not outcome:
        return
    _local_counts[f"import.{outcome}"] += count
    _import_counter.labels(outcome=outcome).inc(count)


def record_launch() -> None:
    _local_counts["launch"] += 1
    _launch_counter.inc()


def snapshot_counts() -> Dict[str, int]:
    """Return the counters accumulated in this process."""

    return dict(_local_counts)
