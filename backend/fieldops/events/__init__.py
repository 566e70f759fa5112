"""Domain events and the in-process dispatcher."""

from .dispatcher import EventDispatcher, EventHandler
from .domain_events import (
    PAYLOAD_TYPES,
    AccountCreatedPayload,
    AccountStatusChangedPayload,
    DiagnosticPayload,
    DomainEvent,
    EventPayload,
    EventType,
    VisitCompletedPayload,
    VisitScheduledPayload,
)
from .handlers import audit_log_handler, register_default_handlers

__all__ = [
    "EventDispatcher",
    "EventHandler",
    "DomainEvent",
    "EventType",
    "EventPayload",
    "PAYLOAD_TYPES",
    "VisitScheduledPayload",
    "VisitCompletedPayload",
    "AccountCreatedPayload",
    "AccountStatusChangedPayload",
    "DiagnosticPayload",
    "audit_log_handler",
    "register_default_handlers",
]
