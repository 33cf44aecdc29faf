"""FastAPI dependencies."""

from taskdesk_service.core.dependencies.api_key import (
    SchedulerKeyDep,
    get_pipeline_settings_dep,
    require_scheduler_key,
)
from taskdesk_service.core.dependencies.auth import CurrentUserDep, get_current_user
from taskdesk_service.core.dependencies.database import (
    SessionDep,
    SessionFactoryDep,
    get_db_session,
    get_session_factory_dep,
)

__all__ = [
    "CurrentUserDep",
    "SchedulerKeyDep",
    "SessionDep",
    "SessionFactoryDep",
    "get_current_user",
    "get_db_session",
    "get_pipeline_settings_dep",
    "get_session_factory_dep",
    "require_scheduler_key",
]
