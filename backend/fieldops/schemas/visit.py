"""
Visit schemas for FieldOps.

Request times are normalized to UTC: aware datetimes are converted and
naive datetimes are taken to already be UTC.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ._strict_base import StrictModel, StrictRequestModel


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VisitCreate(StrictRequestModel):
    """Schedule one technician on one job for a half-open interval."""

    job_id: str = Field(..., min_length=1, description="Job the visit works on")
    technician_id: str = Field(..., min_length=1, description="Technician to assign")
    start_time: datetime = Field(..., description="Inclusive start")
    end_time: datetime = Field(..., description="Exclusive end")

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "VisitCreate":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class VisitComplete(StrictRequestModel):
    summary: str = Field(..., min_length=1, max_length=5000)

    @field_validator("summary")
    @classmethod
    def strip_summary(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("summary must not be blank")
        return stripped


class VisitResponse(StrictModel):
    id: str
    job_id: str
    technician_id: str
    start_time: datetime
    end_time: datetime
    summary: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

