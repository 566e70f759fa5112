"""Request context: who is acting, through which channel, for which request."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from fieldops.core.enums import ActorType, RequestSource, RoleName


class Actor(BaseModel):
    """Identity an operation runs on behalf of."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    role: RoleName
    type: ActorType


class RequestContext(BaseModel):
    """
    Immutable snapshot threaded through every service call.

    ``timestamp`` is for observability only; business rules never branch on it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    request_id: str
    actor: Actor
    source: RequestSource
    timestamp: datetime
