"""
In-process fan-out dispatcher for domain events.

One instance is built by the wiring layer and handed to services.
``emit`` runs every handler registered for the exact event type
concurrently and waits for all of them. Failures are collected and
raised together as EventDispatchError; the write that produced the
event is never rolled back.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from fieldops.context import RequestContext
from fieldops.core.exceptions import EventDispatchError
from fieldops.core.ulid_helper import generate_ulid
from fieldops.monitoring.prometheus_metrics import prometheus_metrics

from .domain_events import DomainEvent, EventPayload, EventType, coerce_payload, event_type_name

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Union[Awaitable[None], None]]


def handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventDispatcher:
    """Registry of handlers keyed by event type name."""

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}
        self.timeout_seconds = timeout_seconds

    def on(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type``. Registering twice runs it twice."""
        self._handlers.setdefault(event_type_name(event_type), []).append(handler)

    def off(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        name = event_type_name(event_type)
        remaining = [existing for existing in self._handlers.get(name, []) if existing is not handler]
        if remaining:
            self._handlers[name] = remaining
        else:
            self._handlers.pop(name, None)

    def handler_count(self, event_type: Union[EventType, str]) -> int:
        return len(self._handlers.get(event_type_name(event_type), []))

    async def emit(
        self,
        ctx: RequestContext,
        event_type: Union[EventType, str],
        payload: Union[EventPayload, Mapping[str, Any]],
    ) -> DomainEvent:
        """
        Build a DomainEvent and deliver it to every registered handler.

        Args:
            ctx: Context of the operation that produced the event
            event_type: Dot-namespaced event type
            payload: Payload model (or mapping of its fields) for the type

        Returns:
            The delivered event

        Raises:
            ValidationException: If the payload does not fit the event type
            EventDispatchError: If any handler failed or the dispatch timed out
        """
        event = DomainEvent(
            id=generate_ulid(),
            type=event_type_name(event_type),
            timestamp=datetime.now(timezone.utc),
            context=ctx,
            payload=coerce_payload(event_type, payload),
        )
        handlers = list(self._handlers.get(event.type, []))
        if not handlers:
            logger.debug("No handlers registered for %s", event.type)
            prometheus_metrics.record_domain_event(event.type, "delivered")
            return event

        gathered = asyncio.gather(
            *(self._invoke(handler, event) for handler in handlers),
            return_exceptions=True,
        )
        try:
            if self.timeout_seconds is not None:
                results = await asyncio.wait_for(gathered, timeout=self.timeout_seconds)
            else:
                results = await gathered
        except asyncio.TimeoutError as exc:
            prometheus_metrics.record_domain_event(event.type, "timeout")
            logger.error(
                "Event %s (%s) handlers timed out after %ss",
                event.type,
                event.id,
                self.timeout_seconds,
                extra={"event_type": event.type, "event_id": event.id},
            )
            raise EventDispatchError(event.type, event.id, timed_out=True) from exc

        failures: List[Tuple[str, BaseException]] = [
            (handler_name(handler), result)
            for handler, result in zip(handlers, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            prometheus_metrics.record_domain_event(
                event.type, "failed", failed_handlers=len(failures)
            )
            for name, error in failures:
                logger.error(
                    "Handler %s failed for event %s (%s): %s",
                    name,
                    event.type,
                    event.id,
                    error,
                    exc_info=error,
                    extra={"event_type": event.type, "event_id": event.id},
                )
            raise EventDispatchError(event.type, event.id, failures)

        prometheus_metrics.record_domain_event(event.type, "delivered")
        logger.info(
            "Delivered %s (%s) to %d handler(s)",
            event.type,
            event.id,
            len(handlers),
        )
        return event

    @staticmethod
    async def _invoke(handler: EventHandler, event: DomainEvent) -> None:
        result = handler(event)
        if inspect.isawaitable(result):
            await result
