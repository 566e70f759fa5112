# backend/fieldops/core/enums.py
"""
Core enums for the FieldOps platform.

This module contains enumeration types used throughout the application
for type safety and consistency. Capabilities are a closed set: the
authorization gate only ever checks members of ``Capability``.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Standard role names.

    Every actor carries exactly one role; the role decides which
    capabilities the actor holds.
    """

    ADMIN = "ADMIN"
    CSR = "CSR"
    TECHNICIAN = "TECHNICIAN"


class Capability(str, Enum):
    """
    Named permissions a role may grant.

    Values keep the wire names used by the rest of the FSM stack.
    """

    # Accounts
    VIEW_ACCOUNTS = "canViewAccounts"
    CREATE_ACCOUNTS = "canCreateAccounts"
    MANAGE_ACCOUNTS = "canManageAccounts"

    # Jobs
    VIEW_JOBS = "canViewJobs"

    # Scheduling
    SCHEDULE_VISITS = "canScheduleVisits"
    VIEW_SCHEDULE = "canViewSchedule"
    COMPLETE_VISITS = "canCompleteVisits"


class ActorType(str, Enum):
    """Kind of identity an operation runs on behalf of."""

    HUMAN = "human"
    SYSTEM = "system"
    AI = "ai"


class RequestSource(str, Enum):
    """Channel an operation originated from."""

    API = "api"
    WORKER = "worker"
    CRON = "cron"
    BETTY = "betty"


class AccountStatus(str, Enum):
    """
    Customer account lifecycle statuses.
    """

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    CLOSED = "CLOSED"


class AccountType(str, Enum):
    """
    Kinds of customer accounts.
    """

    RESIDENTIAL = "RESIDENTIAL"
    COMMERCIAL = "COMMERCIAL"
    PROPERTY_MANAGEMENT = "PROPERTY_MANAGEMENT"


class JobStatus(str, Enum):
    """
    Job lifecycle statuses.
    """

    OPEN = "OPEN"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
