"""Factories for RequestContext."""

from __future__ import annotations

from datetime import datetime, timezone
import time
from typing import Optional, Union

from fieldops.core.constants import BETTY_ACTOR_ID, SYSTEM_ACTOR_ID
from fieldops.core.enums import ActorType, RequestSource, RoleName
from fieldops.core.ulid_helper import generate_ulid

from .models import Actor, RequestContext


def derive_actor_type(actor_id: str, source: RequestSource) -> ActorType:
    """Order matters: an assistant origin wins over everything else."""
    if source == RequestSource.BETTY:
        return ActorType.AI
    if source == RequestSource.CRON or actor_id == SYSTEM_ACTOR_ID:
        return ActorType.SYSTEM
    return ActorType.HUMAN


def create_context(
    actor_id: str,
    role: Union[RoleName, str],
    source: Union[RequestSource, str],
    request_id: Optional[str] = None,
) -> RequestContext:
    """
    Build the context for one inbound operation.

    Args:
        actor_id: Identifier of the acting user or process
        role: Role of the actor
        source: Channel the operation came from
        request_id: Upstream trace id; a fresh ULID is generated when missing

    Returns:
        Frozen RequestContext
    """
    source = RequestSource(source)
    return RequestContext(
        request_id=request_id or generate_ulid(),
        actor=Actor(
            id=actor_id,
            role=RoleName(role),
            type=derive_actor_type(actor_id, source),
        ),
        source=source,
        timestamp=datetime.now(timezone.utc),
    )


def create_betty_context(conversation_id: Optional[str] = None) -> RequestContext:
    """Context for operations requested by the Betty assistant (elevated role)."""
    return create_context(
        actor_id=BETTY_ACTOR_ID,
        role=RoleName.ADMIN,
        source=RequestSource.BETTY,
        request_id=conversation_id,
    )


def create_system_context(job_name: str) -> RequestContext:
    """Context for scheduled/background jobs; request ids are unique per run."""
    return create_context(
        actor_id=SYSTEM_ACTOR_ID,
        role=RoleName.ADMIN,
        source=RequestSource.CRON,
        request_id=f"cron-{job_name}-{time.time_ns() // 1_000_000}",
    )
