"""Job routes - API v1."""

from fastapi import APIRouter, Depends

from ...api.dependencies import get_job_service, get_request_context
from ...context import RequestContext
from ...schemas.job import JobResponse
from ...services.job_service import JobService
from ._results import unwrap_or_raise

router = APIRouter(tags=["jobs-v1"])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: JobService = Depends(get_job_service),
) -> JobResponse:
    result = await service.get_job(ctx, job_id)
    return JobResponse.model_validate(unwrap_or_raise(result))
