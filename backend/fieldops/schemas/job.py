"""Job schemas for FieldOps."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel
from .visit import VisitResponse


class JobResponse(StrictModel):
    id: str
    account_id: str
    title: str
    description: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    visits: List[VisitResponse] = Field(default_factory=list)
