# backend/fieldops/services/scheduling_service.py
"""
Scheduling Service for FieldOps

Orchestrates technician visits:
- Authorization before any state change
- Conflict detection and insert in one transaction, serialized per technician
- Domain events after the write commits

Expected rejections (missing capability, resource denial, schedule
conflict, unknown visit) come back as ``Err``. Infrastructure failures
raise. A handler failure after commit raises EventDispatchError carrying
the committed visit; the visit is never rolled back.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import threading
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ..context import RequestContext
from ..core.config import settings
from ..core.constants import DEFAULT_QUERY_LIMIT
from ..core.enums import Capability
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    EventDispatchError,
    NotFoundException,
    ScheduleConflictError,
)
from ..core.results import Err, Ok, Result
from ..core.technician_lock import TechnicianLockRegistry
from ..events import (
    EventDispatcher,
    EventPayload,
    EventType,
    VisitCompletedPayload,
    VisitScheduledPayload,
)
from ..models.visit import Visit
from ..repositories.job_repository import JobRepository
from ..repositories.user_repository import UserRepository
from ..repositories.visit_repository import VisitRepository
from ..schemas.visit import VisitCreate
from .authorization import check_capability, check_resource_access
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)

CreateVisitResult = Result[Visit, Union[AuthorizationError, ScheduleConflictError]]
CompleteVisitResult = Result[Visit, Union[AuthorizationError, NotFoundException]]


class SchedulingService(BaseService):
    """
    Service layer for technician visits.

    The dispatcher and lock registry are process-wide and injected by the
    application factory. Each unit of work opens its own session.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        dispatcher: EventDispatcher,
        locks: TechnicianLockRegistry,
    ):
        super().__init__(session_factory)
        self.dispatcher = dispatcher
        self.locks = locks

    @BaseService.measure_operation("create_visit")
    async def create_visit(self, ctx: RequestContext, data: VisitCreate) -> CreateVisitResult:
        """
        Schedule a visit if the actor may and the technician is free.

        Args:
            ctx: Context of the calling operation
            data: Validated visit request (UTC, start before end)

        Returns:
            Ok(visit) once persisted and announced, or Err with the rejection

        Raises:
            NotFoundException: If the job or technician does not exist
            OperationTimeoutException: If persistence does not finish in time
            EventDispatchError: If a visit.scheduled handler failed (visit is kept)
        """
        allowed = check_capability(ctx, Capability.SCHEDULE_VISITS)
        if not allowed.ok:
            self.logger.info(
                f"Denied create_visit for {ctx.actor.id}: missing {Capability.SCHEDULE_VISITS.value}"
            )
            return allowed

        self.log_operation(
            "create_visit",
            technician_id=data.technician_id,
            job_id=data.job_id,
            request_id=ctx.request_id,
        )

        abandoned = threading.Event()
        try:
            visit = await self.locks.run_exclusive(
                data.technician_id,
                lambda: self.run_in_session(
                    "create_visit", lambda session: self._insert_visit(session, data), abandoned
                ),
                operation="create_visit",
                timeout_seconds=settings.persistence_timeout_seconds,
                abandoned=abandoned,
            )
        except ScheduleConflictError as conflict:
            return Err(conflict)
        except IntegrityError as exc:
            self.logger.warning(f"Integrity violation scheduling {data.technician_id}: {exc}")
            return Err(
                ConflictError.schedule_conflict(data.technician_id, data.start_time, data.end_time)
            )

        self.logger.info(
            f"Scheduled visit {visit.id} for technician {visit.technician_id} "
            f"{visit.start_time.isoformat()}-{visit.end_time.isoformat()}"
        )

        await self._emit(
            ctx,
            EventType.VISIT_SCHEDULED,
            VisitScheduledPayload(
                visit_id=visit.id,
                job_id=visit.job_id,
                technician_id=visit.technician_id,
                start_time=visit.start_time,
                end_time=visit.end_time,
            ),
            visit,
        )
        return Ok(visit)

    def _insert_visit(self, session: Session, data: VisitCreate) -> Visit:
        """Conflict check and insert; runs in a worker thread under the technician lock."""
        visits = VisitRepository(session)
        _ensure_references(session, data)
        visits.lock_technician_schedule(data.technician_id)
        if ConflictChecker(session, visits).has_conflict(
            data.technician_id, data.start_time, data.end_time
        ):
            raise ConflictError.schedule_conflict(data.technician_id, data.start_time, data.end_time)
        return visits.create(
            job_id=data.job_id,
            technician_id=data.technician_id,
            start_time=data.start_time,
            end_time=data.end_time,
        )

    @BaseService.measure_operation("complete_visit")
    async def complete_visit(
        self, ctx: RequestContext, visit_id: str, summary: str
    ) -> CompleteVisitResult:
        """
        Record the work summary on a visit and announce completion.

        Technicians may only complete their own visits.

        Raises:
            OperationTimeoutException: If persistence does not finish in time
            EventDispatchError: If a visit.completed handler failed (summary is kept)
        """
        allowed = check_capability(ctx, Capability.COMPLETE_VISITS)
        if not allowed.ok:
            return allowed

        self.log_operation("complete_visit", visit_id=visit_id, request_id=ctx.request_id)
        outcome = await self.run_db(
            "complete_visit", lambda session: _apply_summary(session, ctx, visit_id, summary)
        )
        if not outcome.ok:
            return outcome

        visit = outcome.value
        await self._emit(
            ctx,
            EventType.VISIT_COMPLETED,
            VisitCompletedPayload(visit_id=visit.id, technician_id=visit.technician_id),
            visit,
        )
        return Ok(visit)

    @BaseService.measure_operation("get_upcoming_visits")
    async def get_upcoming_visits(
        self,
        ctx: RequestContext,
        technician_id: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> Result[List[Visit], AuthorizationError]:
        """Visits starting now or later, earliest first, optionally for one technician."""
        allowed = check_capability(ctx, Capability.VIEW_SCHEDULE)
        if not allowed.ok:
            return allowed

        now = datetime.now(timezone.utc)
        visits = await self.run_db(
            "get_upcoming_visits",
            lambda session: VisitRepository(session).get_upcoming(
                now, technician_id=technician_id, limit=limit
            ),
        )
        return Ok(visits)

    async def _emit(
        self,
        ctx: RequestContext,
        event_type: EventType,
        payload: EventPayload,
        committed: Visit,
    ) -> None:
        try:
            await self.dispatcher.emit(ctx, event_type, payload)
        except EventDispatchError as exc:
            exc.committed_entity = committed
            self.logger.error(
                f"Visit {committed.id} committed but {event_type.value} propagation incomplete: "
                f"{exc.message}"
            )
            raise


def _ensure_references(session: Session, data: VisitCreate) -> None:
    if JobRepository(session).get_by_id(data.job_id, load_relationships=False) is None:
        raise NotFoundException(
            f"Job {data.job_id} not found", code="JOB_NOT_FOUND", details={"job_id": data.job_id}
        )
    technician = UserRepository(session).get_by_id(data.technician_id, load_relationships=False)
    if technician is None or not technician.is_technician:
        raise NotFoundException(
            f"Technician {data.technician_id} not found",
            code="TECHNICIAN_NOT_FOUND",
            details={"technician_id": data.technician_id},
        )


def _apply_summary(
    session: Session, ctx: RequestContext, visit_id: str, summary: str
) -> CompleteVisitResult:
    visits = VisitRepository(session)
    visit = visits.get_by_id(visit_id, load_relationships=False)
    if visit is None:
        return Err(
            NotFoundException(
                f"Visit {visit_id} not found",
                code="VISIT_NOT_FOUND",
                details={"visit_id": visit_id},
            )
        )
    access = check_resource_access(ctx, "visit", visit.id, visit.technician_id)
    if not access.ok:
        return access
    visits.update_summary(visit, summary)
    return Ok(visit)
