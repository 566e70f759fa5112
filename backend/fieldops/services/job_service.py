"""Job Service for FieldOps: read access to jobs and their visits."""

import logging
from typing import Union

from ..context import RequestContext
from ..core.enums import Capability
from ..core.exceptions import AuthorizationError, NotFoundException
from ..core.results import Err, Ok, Result
from ..models.job import Job
from ..repositories.job_repository import JobRepository
from .authorization import check_capability
from .base import BaseService

logger = logging.getLogger(__name__)


class JobService(BaseService):
    @BaseService.measure_operation("get_job")
    async def get_job(
        self, ctx: RequestContext, job_id: str
    ) -> Result[Job, Union[AuthorizationError, NotFoundException]]:
        """Load a job with its visits (earliest first)."""
        allowed = check_capability(ctx, Capability.VIEW_JOBS)
        if not allowed.ok:
            return allowed

        job = await self.run_db("get_job", lambda session: JobRepository(session).get_by_id(job_id))
        if job is None:
            return Err(
                NotFoundException(
                    f"Job {job_id} not found", code="JOB_NOT_FOUND", details={"job_id": job_id}
                )
            )
        return Ok(job)
