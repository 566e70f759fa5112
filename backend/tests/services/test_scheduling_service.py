# backend/tests/services/test_scheduling_service.py
"""
Tests for SchedulingService.

Covers authorization before side effects, conflict rejection, event
emission after commit, completion with resource-level checks, and the
retryable persistence timeout.
"""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from fieldops.context import create_context
from fieldops.core.config import settings
from fieldops.core.enums import RequestSource, RoleName
from fieldops.core.exceptions import (
    AuthorizationError,
    EventDispatchError,
    NotFoundException,
    OperationTimeoutException,
    ScheduleConflictError,
)
from fieldops.events import EventType, VisitCompletedPayload, VisitScheduledPayload
from fieldops.models import Visit
from fieldops.services.scheduling_service import SchedulingService


@pytest.fixture
def service(session_factory, dispatcher, technician_locks, seed):
    return SchedulingService(session_factory, dispatcher, technician_locks)


def visit_count(session_factory) -> int:
    with session_factory() as session:
        return session.query(Visit).count()


class TestCreateVisit:
    @pytest.mark.asyncio
    async def test_schedules_and_emits(self, service, csr_ctx, visit_request, recorded_events, session_factory):
        result = await service.create_visit(csr_ctx, visit_request(9, 10))

        assert result.ok
        visit = result.value
        assert visit.id and len(visit.id) == 26
        assert visit.summary is None
        assert visit_count(session_factory) == 1

        assert [e.type for e in recorded_events] == ["visit.scheduled"]
        payload = recorded_events[0].payload
        assert isinstance(payload, VisitScheduledPayload)
        assert payload.visit_id == visit.id
        assert payload.start_time == visit.start_time
        assert recorded_events[0].context.request_id == csr_ctx.request_id

    @pytest.mark.asyncio
    async def test_technician_cannot_schedule(self, service, tech_ctx, visit_request, recorded_events, session_factory):
        result = await service.create_visit(tech_ctx, visit_request(9, 10))

        assert not result.ok
        assert isinstance(result.error, AuthorizationError)
        assert result.error.details == {"required": "canScheduleVisits", "actor": tech_ctx.actor.id}
        assert visit_count(session_factory) == 0
        assert recorded_events == []

    @pytest.mark.asyncio
    async def test_denial_happens_before_any_session_is_opened(self, dispatcher, technician_locks, tech_ctx, visit_request):
        session_factory = MagicMock()
        service = SchedulingService(session_factory, dispatcher, technician_locks)

        result = await service.create_visit(tech_ctx, visit_request(9, 10))

        assert not result.ok
        session_factory.assert_not_called()
        assert len(technician_locks) == 0

    @pytest.mark.asyncio
    async def test_overlap_is_rejected(self, service, csr_ctx, visit_request, recorded_events, session_factory):
        assert (await service.create_visit(csr_ctx, visit_request(9, 11))).ok

        result = await service.create_visit(csr_ctx, visit_request(10, 12))

        assert not result.ok
        assert isinstance(result.error, ScheduleConflictError)
        assert result.error.technician_id == visit_request(10, 12).technician_id
        assert result.error.conflict_type == "schedule"
        assert visit_count(session_factory) == 1
        assert len(recorded_events) == 1

    @pytest.mark.asyncio
    async def test_identical_interval_is_rejected(self, service, csr_ctx, visit_request):
        assert (await service.create_visit(csr_ctx, visit_request(9, 10))).ok
        result = await service.create_visit(csr_ctx, visit_request(9, 10))
        assert isinstance(result.error, ScheduleConflictError)

    @pytest.mark.asyncio
    async def test_back_to_back_visits_are_allowed(self, service, csr_ctx, visit_request, session_factory):
        assert (await service.create_visit(csr_ctx, visit_request(9, 10))).ok
        assert (await service.create_visit(csr_ctx, visit_request(10, 11))).ok
        assert (await service.create_visit(csr_ctx, visit_request(8, 9))).ok
        assert visit_count(session_factory) == 3

    @pytest.mark.asyncio
    async def test_other_technician_is_independent(self, service, csr_ctx, visit_request, seed):
        assert (await service.create_visit(csr_ctx, visit_request(9, 11))).ok
        result = await service.create_visit(csr_ctx, visit_request(9, 11, technician_id=seed.tech_b_id))
        assert result.ok

    @pytest.mark.asyncio
    async def test_handler_failure_keeps_visit(self, service, dispatcher, csr_ctx, visit_request, session_factory):
        async def notify_technician(event):
            raise RuntimeError("push gateway unavailable")

        dispatcher.on(EventType.VISIT_SCHEDULED, notify_technician)

        with pytest.raises(EventDispatchError) as exc_info:
            await service.create_visit(csr_ctx, visit_request(9, 10))

        error = exc_info.value
        assert isinstance(error.committed_entity, Visit)
        assert error.details["committed"] is True
        with session_factory() as session:
            stored = session.get(Visit, error.committed_entity.id)
            assert stored is not None

    @pytest.mark.asyncio
    async def test_unknown_job_is_not_found(self, service, csr_ctx, visit_request, session_factory):
        request = visit_request(9, 10).model_copy(update={"job_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ"})
        with pytest.raises(NotFoundException):
            await service.create_visit(csr_ctx, request)
        assert visit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_non_technician_assignee_is_not_found(self, service, csr_ctx, visit_request, seed):
        with pytest.raises(NotFoundException) as exc_info:
            await service.create_visit(csr_ctx, visit_request(9, 10, technician_id=seed.csr_id))
        assert exc_info.value.code == "TECHNICIAN_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_persistence_timeout_is_retryable(
        self,
        service,
        csr_ctx,
        visit_request,
        seed,
        technician_locks,
        monkeypatch,
        recorded_events,
        session_factory,
    ):
        monkeypatch.setattr(settings, "persistence_timeout_seconds", 0.05)
        release = threading.Event()
        insert_visit = service._insert_visit

        def slow_insert(session, data):
            visit = insert_visit(session, data)
            release.wait(5)
            return visit

        service._insert_visit = slow_insert

        with pytest.raises(OperationTimeoutException) as exc_info:
            await service.create_visit(csr_ctx, visit_request(9, 10))

        assert exc_info.value.retryable
        assert recorded_events == []
        # The in-flight write still owns the schedule until its thread ends
        assert technician_locks.is_locked(seed.tech_a_id)

        release.set()
        for _ in range(200):
            if not technician_locks.is_locked(seed.tech_a_id):
                break
            await asyncio.sleep(0.01)
        assert not technician_locks.is_locked(seed.tech_a_id)
        assert len(technician_locks) == 0
        # The caller was told the write failed, so it must not have landed
        assert visit_count(session_factory) == 0

        service._insert_visit = insert_visit
        monkeypatch.setattr(settings, "persistence_timeout_seconds", 10.0)
        assert (await service.create_visit(csr_ctx, visit_request(9, 10))).ok
        assert visit_count(session_factory) == 1


class TestCompleteVisit:
    @pytest_asyncio.fixture
    async def scheduled(self, service, csr_ctx, visit_request):
        return (await service.create_visit(csr_ctx, visit_request(9, 10))).unwrap()

    @pytest.mark.asyncio
    async def test_technician_completes_own_visit(self, service, tech_ctx, scheduled, recorded_events, session_factory):
        result = await service.complete_visit(tech_ctx, scheduled.id, "Replaced anode rod")

        assert result.ok
        assert result.value.summary == "Replaced anode rod"
        with session_factory() as session:
            assert session.get(Visit, scheduled.id).summary == "Replaced anode rod"

        completed = [e for e in recorded_events if e.type == "visit.completed"]
        assert len(completed) == 1
        assert completed[0].payload == VisitCompletedPayload(
            visit_id=scheduled.id, technician_id=scheduled.technician_id
        )

    @pytest.mark.asyncio
    async def test_technician_cannot_complete_foreign_visit(self, service, seed, scheduled, recorded_events, session_factory):
        other = create_context(seed.tech_b_id, RoleName.TECHNICIAN, RequestSource.API)

        result = await service.complete_visit(other, scheduled.id, "Not mine")

        assert not result.ok
        assert result.error.is_resource_denial
        assert result.error.details == {"resource": f"visit:{scheduled.id}"}
        with session_factory() as session:
            assert session.get(Visit, scheduled.id).summary is None
        assert "visit.completed" not in [e.type for e in recorded_events]

    @pytest.mark.asyncio
    async def test_csr_lacks_completion_capability(self, service, csr_ctx, scheduled):
        result = await service.complete_visit(csr_ctx, scheduled.id, "Done")
        assert not result.ok
        assert result.error.details["required"] == "canCompleteVisits"

    @pytest.mark.asyncio
    async def test_admin_completes_any_visit(self, service, admin_ctx, scheduled):
        result = await service.complete_visit(admin_ctx, scheduled.id, "Closed out by admin")
        assert result.ok

    @pytest.mark.asyncio
    async def test_missing_visit(self, service, tech_ctx, seed):
        result = await service.complete_visit(tech_ctx, "01HZZZZZZZZZZZZZZZZZZZZZZZ", "Done")
        assert not result.ok
        assert isinstance(result.error, NotFoundException)


class TestUpcomingVisits:
    @pytest.mark.asyncio
    async def test_upcoming_are_ordered_and_filtered(self, service, csr_ctx, visit_request, seed):
        late = (await service.create_visit(csr_ctx, visit_request(14, 15))).unwrap()
        early = (await service.create_visit(csr_ctx, visit_request(8, 9))).unwrap()
        other = (
            await service.create_visit(csr_ctx, visit_request(10, 11, technician_id=seed.tech_b_id))
        ).unwrap()

        everyone = (await service.get_upcoming_visits(csr_ctx)).unwrap()
        assert [v.id for v in everyone] == [early.id, other.id, late.id]

        mine = (await service.get_upcoming_visits(csr_ctx, technician_id=seed.tech_a_id)).unwrap()
        assert [v.id for v in mine] == [early.id, late.id]

    @pytest.mark.asyncio
    async def test_technician_can_view_schedule(self, service, tech_ctx):
        assert (await service.get_upcoming_visits(tech_ctx)).ok
