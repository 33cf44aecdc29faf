"""Prometheus metrics for reminder and notification delivery.

Usage:
    from taskdesk_service.features.notifications.metrics import (
        notification_delivered_total,
    )

    notification_delivered_total.labels(channel="push", status="delivered").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Channel Delivery Metrics
# =============================================================================

notification_delivered_total = Counter(
    "taskdesk_notification_delivered_total",
    "Total number of notification deliveries by channel and status",
    labelnames=["channel", "status"],
)
"""
Counter for channel delivery attempts and results.

Labels:
    channel: push or in_app
    status: delivered or failed
"""

notification_errors_total = Counter(
    "taskdesk_notification_errors_total",
    "Total number of notification delivery errors by category",
    labelnames=["channel", "error_category"],
)
"""
Counter for failed deliveries.

Labels:
    channel: push or in_app
    error_category: push_rejected, no_subscriptions, exception, ...
"""

notification_delivery_duration_seconds = Histogram(
    "taskdesk_notification_delivery_duration_seconds",
    "Time spent delivering a notification through one channel",
    labelnames=["channel"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

push_subscriptions_pruned_total = Counter(
    "taskdesk_push_subscriptions_pruned_total",
    "Push subscriptions deleted after the push service reported them gone",
)

# =============================================================================
# Reminder Metrics
# =============================================================================

reminder_dispatch_total = Counter(
    "taskdesk_reminder_dispatch_total",
    "Reminder dispatch results",
    labelnames=["outcome"],
)
"""
Counter for reminder dispatches.

Labels:
    outcome: sent, failed, cancelled
"""
