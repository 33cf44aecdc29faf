"""Model registry.

Importing this package loads every mapped class so ``Base.metadata`` is
complete for Alembic and for test schema creation.
"""

from __future__ import annotations

from taskdesk_service.core.models.user import User
from taskdesk_service.features.activity.models import ActivityLogEntry
from taskdesk_service.features.digests.models import Digest
from taskdesk_service.features.notifications.models import InAppMessage, PushSubscription
from taskdesk_service.features.reminders.models import Reminder
from taskdesk_service.features.tasks.models import Task

__all__ = [
    "ActivityLogEntry",
    "Digest",
    "InAppMessage",
    "PushSubscription",
    "Reminder",
    "Task",
    "User",
]
