"""
Service layer for FieldOps.

Services authorize, orchestrate repositories and own transactions.
"""

from .account_service import AccountService
from .authorization import (
    ROLE_CAPABILITIES,
    check_capability,
    check_resource_access,
    has_capability,
    require_capability,
)
from .base import BaseService
from .conflict_checker import ConflictChecker, intervals_overlap
from .job_service import JobService
from .scheduling_service import SchedulingService

__all__ = [
    "AccountService",
    "BaseService",
    "ConflictChecker",
    "JobService",
    "ROLE_CAPABILITIES",
    "SchedulingService",
    "check_capability",
    "check_resource_access",
    "has_capability",
    "intervals_overlap",
    "require_capability",
]
