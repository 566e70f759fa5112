# backend/fieldops/routes/v1/visits.py
"""
Visit routes - API v1

Scheduling and completion of technician visits.

Endpoints:
    POST /                       → Schedule a visit
    GET /upcoming                → Upcoming visits, optionally for one technician
    POST /{visit_id}/complete    → Record the work summary
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies import get_request_context, get_scheduling_service
from ...context import RequestContext
from ...core.constants import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from ...core.exceptions import EventDispatchError
from ...schemas.visit import VisitComplete, VisitCreate, VisitResponse
from ...services.scheduling_service import SchedulingService
from ._results import mark_propagation_incomplete, unwrap_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(tags=["visits-v1"])


@router.post(
    "",
    response_model=VisitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Missing capability"},
        409: {"description": "Technician already booked for an overlapping interval"},
        503: {"description": "Persistence timed out; safe to retry"},
    },
)
async def create_visit(
    payload: VisitCreate,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    service: SchedulingService = Depends(get_scheduling_service),
) -> VisitResponse:
    """
    Schedule a technician visit.

    A 201 carrying ``X-Event-Propagation: incomplete`` means the visit was
    stored but a downstream handler failed.
    """
    try:
        result = await service.create_visit(ctx, payload)
    except EventDispatchError as exc:
        if exc.committed_entity is None:
            raise
        mark_propagation_incomplete(response)
        return VisitResponse.model_validate(exc.committed_entity)

    return VisitResponse.model_validate(unwrap_or_raise(result))


@router.get("/upcoming", response_model=List[VisitResponse])
async def get_upcoming_visits(
    technician_id: Optional[str] = Query(None, description="Only this technician's visits"),
    limit: int = Query(DEFAULT_QUERY_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    ctx: RequestContext = Depends(get_request_context),
    service: SchedulingService = Depends(get_scheduling_service),
) -> List[VisitResponse]:
    result = await service.get_upcoming_visits(ctx, technician_id=technician_id, limit=limit)
    return [VisitResponse.model_validate(visit) for visit in unwrap_or_raise(result)]


@router.post("/{visit_id}/complete", response_model=VisitResponse)
async def complete_visit(
    visit_id: str,
    payload: VisitComplete,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    service: SchedulingService = Depends(get_scheduling_service),
) -> VisitResponse:
    try:
        result = await service.complete_visit(ctx, visit_id, payload.summary)
    except EventDispatchError as exc:
        if exc.committed_entity is None:
            raise
        mark_propagation_incomplete(response)
        return VisitResponse.model_validate(exc.committed_entity)

    return VisitResponse.model_validate(unwrap_or_raise(result))
