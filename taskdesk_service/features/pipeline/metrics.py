"""Prometheus metrics for scheduler-triggered batches."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

pipeline_runs_total = Counter(
    "taskdesk_pipeline_runs_total",
    "Scheduler-triggered batch runs",
    labelnames=["operation", "result"],
)
"""
Counter for batch runs.

Labels:
    operation: process_reminders or generate_digests
    result: completed or error
"""

pipeline_batch_duration_seconds = Histogram(
    "taskdesk_pipeline_batch_duration_seconds",
    "Wall-clock duration of one batch run",
    labelnames=["operation"],
    buckets=(0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)

pipeline_unit_errors_total = Counter(
    "taskdesk_pipeline_unit_errors_total",
    "Unexpected exceptions raised by one unit of batch work",
    labelnames=["operation"],
)
