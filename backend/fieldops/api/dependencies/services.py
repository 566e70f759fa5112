# backend/fieldops/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Services are built per request around the application's session factory.
The event dispatcher and technician lock registry are process-wide and
live on ``app.state``.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from ...core.technician_lock import TechnicianLockRegistry
from ...events import EventDispatcher
from ...services.account_service import AccountService
from ...services.job_service import JobService
from ...services.scheduling_service import SchedulingService
from .database import get_session_factory


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


def get_technician_locks(request: Request) -> TechnicianLockRegistry:
    return request.app.state.technician_locks


def get_scheduling_service(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    locks: TechnicianLockRegistry = Depends(get_technician_locks),
) -> SchedulingService:
    return SchedulingService(session_factory, dispatcher, locks)


def get_account_service(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> AccountService:
    return AccountService(session_factory, dispatcher)


def get_job_service(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> JobService:
    return JobService(session_factory)
