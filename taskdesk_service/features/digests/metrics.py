"""Prometheus metrics for digest generation."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

digest_generation_total = Counter(
    "taskdesk_digest_generation_total",
    "Digest requests by type and result",
    labelnames=["digest_type", "result"],
)
"""
Counter for digest get-or-create calls.

Labels:
    digest_type: morning or afternoon
    result: generated, reused, failed, parse_error
"""

digest_generation_duration_seconds = Histogram(
    "taskdesk_digest_generation_duration_seconds",
    "Time spent assembling one digest, including the summarization call",
    labelnames=["digest_type"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
)

digest_notice_total = Counter(
    "taskdesk_digest_notice_total",
    "Digest-ready push notices by result",
    labelnames=["result"],
)
