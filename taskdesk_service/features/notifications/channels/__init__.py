"""Delivery channels for reminders and digest notices."""

from taskdesk_service.features.notifications.channels.base import (
    DeliveryResult,
    Notice,
    NotificationChannel,
)
from taskdesk_service.features.notifications.channels.in_app import InAppChannel
from taskdesk_service.features.notifications.channels.push import PushChannel

__all__ = [
    "DeliveryResult",
    "InAppChannel",
    "Notice",
    "NotificationChannel",
    "PushChannel",
]
