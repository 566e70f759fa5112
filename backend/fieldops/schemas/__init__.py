"""Request and response schemas."""

from .account import (
    AccountCreate,
    AccountResponse,
    AccountStatusUpdate,
    AddressInput,
    CustomerName,
)
from .job import JobResponse
from .visit import VisitComplete, VisitCreate, VisitResponse

__all__ = [
    "AccountCreate",
    "AccountResponse",
    "AccountStatusUpdate",
    "AddressInput",
    "CustomerName",
    "JobResponse",
    "VisitComplete",
    "VisitCreate",
    "VisitResponse",
]
