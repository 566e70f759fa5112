"""Typed domain events emitted after successful writes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Type, Union

from pydantic import BaseModel, ConfigDict, SerializeAsAny

from fieldops.context import RequestContext
from fieldops.core.enums import AccountStatus
from fieldops.core.exceptions import ValidationException


class EventType(str, Enum):
    """Dot-namespaced names of the core event types."""

    VISIT_SCHEDULED = "visit.scheduled"
    VISIT_COMPLETED = "visit.completed"
    ACCOUNT_CREATED = "account.created"
    ACCOUNT_STATUS_CHANGED = "account.status_changed"


class EventPayload(BaseModel):
    """Base class for event payloads."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class VisitScheduledPayload(EventPayload):
    visit_id: str
    job_id: str
    technician_id: str
    start_time: datetime
    end_time: datetime


class VisitCompletedPayload(EventPayload):
    visit_id: str
    technician_id: str


class AccountCreatedPayload(EventPayload):
    account_id: str
    account_number: str


class AccountStatusChangedPayload(EventPayload):
    account_id: str
    status: AccountStatus


class DiagnosticPayload(EventPayload):
    """Open payload for ad-hoc diagnostic events; core events never use it."""

    model_config = ConfigDict(extra="allow", frozen=True)


PAYLOAD_TYPES: Dict[str, Type[EventPayload]] = {
    EventType.VISIT_SCHEDULED.value: VisitScheduledPayload,
    EventType.VISIT_COMPLETED.value: VisitCompletedPayload,
    EventType.ACCOUNT_CREATED.value: AccountCreatedPayload,
    EventType.ACCOUNT_STATUS_CHANGED.value: AccountStatusChangedPayload,
}


class DomainEvent(BaseModel):
    """Envelope handed to every handler registered for ``type``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    type: str
    timestamp: datetime
    context: RequestContext
    payload: SerializeAsAny[EventPayload]


def event_type_name(event_type: Union[EventType, str]) -> str:
    return event_type.value if isinstance(event_type, EventType) else str(event_type)


def coerce_payload(
    event_type: Union[EventType, str],
    payload: Union[EventPayload, Mapping[str, Any]],
) -> EventPayload:
    """
    Validate ``payload`` against the model registered for ``event_type``.

    Core event types accept their own payload model or a mapping of its
    fields. Any other type name is treated as a diagnostic event.

    Raises:
        ValidationException: If the payload does not fit the event type
    """
    name = event_type_name(event_type)
    expected = PAYLOAD_TYPES.get(name, DiagnosticPayload)

    if isinstance(payload, expected):
        return payload
    if isinstance(payload, EventPayload):
        raise ValidationException(
            f"Payload {type(payload).__name__} does not match event type {name}",
            code="INVALID_EVENT_PAYLOAD",
            details={"event_type": name, "expected": expected.__name__},
        )
    try:
        return expected.model_validate(dict(payload))
    except ValueError as exc:
        raise ValidationException(
            f"Invalid payload for event type {name}",
            code="INVALID_EVENT_PAYLOAD",
            details={"event_type": name, "expected": expected.__name__, "error": str(exc)},
        ) from exc
