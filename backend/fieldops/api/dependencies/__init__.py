"""FastAPI dependencies."""

from .context import get_request_context
from .database import get_session_factory
from .services import (
    get_account_service,
    get_event_dispatcher,
    get_job_service,
    get_scheduling_service,
    get_technician_locks,
)

__all__ = [
    "get_account_service",
    "get_event_dispatcher",
    "get_job_service",
    "get_request_context",
    "get_scheduling_service",
    "get_session_factory",
    "get_technician_locks",
]
