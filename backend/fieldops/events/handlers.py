"""Default handlers registered by the application factory."""

import logging

from .dispatcher import EventDispatcher
from .domain_events import DomainEvent, EventType

logger = logging.getLogger("fieldops.events.audit")


async def audit_log_handler(event: DomainEvent) -> None:
    """Write one structured audit line per delivered event."""
    logger.info(
        "audit event=%s id=%s actor=%s source=%s request=%s",
        event.type,
        event.id,
        event.context.actor.id,
        event.context.source.value,
        event.context.request_id,
        extra={"event_payload": event.payload.model_dump(mode="json")},
    )


def register_default_handlers(dispatcher: EventDispatcher) -> None:
    for event_type in EventType:
        dispatcher.on(event_type, audit_log_handler)
