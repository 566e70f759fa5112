# backend/fieldops/core/exceptions.py
"""
Domain-specific exceptions for the FieldOps platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

Authorization failures come in two flavours that share one kind:
missing capability (details carry ``required`` and ``actor``) and
resource access (details carry ``resource``).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def _http_detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self._http_detail(),
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=self._http_detail())


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=self._http_detail())


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=self._http_detail())


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self._http_detail())


# Specific business exceptions


class AuthorizationError(ForbiddenException):
    """Raised when an actor lacks a capability or access to a specific resource."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        *,
        required: Optional[str] = None,
        actor: Optional[str] = None,
        resource: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if required is not None:
            details["required"] = required
        if actor is not None:
            details["actor"] = actor
        if resource is not None:
            details["resource"] = resource
        super().__init__(message=message, code="AUTHORIZATION_ERROR", details=details)

    @classmethod
    def missing_capability(cls, capability: str, actor_id: str) -> "AuthorizationError":
        return cls("Missing required capability", required=capability, actor=actor_id)

    @classmethod
    def resource_access(cls, resource_type: str, resource_id: str) -> "AuthorizationError":
        return cls("Cannot access resource", resource=f"{resource_type}:{resource_id}")

    @property
    def is_resource_denial(self) -> bool:
        return "resource" in self.details


class ConflictError(ConflictException):
    """Raised when a write would clash with existing state."""

    def __init__(
        self,
        message: str = "Resource conflict detected",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code="CONFLICT_ERROR", details=details or {})

    @property
    def conflict_type(self) -> Optional[str]:
        return self.details.get("conflict_type")

    @classmethod
    def duplicate_resource(cls, resource_type: str, identifier: str) -> "ConflictError":
        return cls(
            "Resource already exists",
            details={
                "resource": f"{resource_type}:{identifier}",
                "conflict_type": "duplicate",
            },
        )

    @classmethod
    def schedule_conflict(
        cls, technician_id: str, start_time: datetime, end_time: datetime
    ) -> "ScheduleConflictError":
        return ScheduleConflictError(technician_id, start_time, end_time)


class ScheduleConflictError(ConflictError):
    """Raised when a visit interval overlaps another visit of the same technician."""

    def __init__(self, technician_id: str, start_time: datetime, end_time: datetime) -> None:
        self.technician_id = technician_id
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            "Schedule conflict detected",
            details={
                "resource": f"technician:{technician_id}",
                "conflict_type": "schedule",
                "technician_id": technician_id,
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
            },
        )


class EventDispatchError(DomainException):
    """
    Raised when one or more event handlers fail or time out.

    The mutation that produced the event is already committed: callers
    must read this as "committed but incompletely propagated".
    """

    def __init__(
        self,
        event_type: str,
        event_id: str,
        failures: Sequence[Tuple[str, BaseException]] = (),
        *,
        timed_out: bool = False,
    ) -> None:
        self.event_type = event_type
        self.event_id = event_id
        self.failures: List[Tuple[str, BaseException]] = list(failures)
        self.timed_out = timed_out
        self.committed_entity: Any = None
        self.retryable = timed_out
        if timed_out:
            message = f"Event {event_type} handlers did not finish in time"
        else:
            message = f"{len(self.failures)} handler(s) failed for event {event_type}"
        super().__init__(
            message=message,
            code="EVENT_DISPATCH_ERROR",
            details={
                "event_type": event_type,
                "event_id": event_id,
                "failed_handlers": [name for name, _ in self.failures],
                "timed_out": timed_out,
                "committed": True,
            },
        )


class OperationTimeoutException(DomainException):
    """Raised when a bounded step does not finish in time. Safe to retry."""

    retryable = True

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        super().__init__(
            message=f"Operation {operation} timed out after {timeout_seconds:g}s",
            code="OPERATION_TIMEOUT",
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=self._http_detail(),
            headers={"Retry-After": "2"},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
