"""
Request context dependency.

Authentication happens upstream; the gateway forwards the actor id and
role. Unauthenticated calls act as ``anonymous`` with the CSR role.
"""

from fastapi import Request

from ...context import RequestContext, create_context
from ...core.constants import (
    ACTOR_ID_HEADER,
    ACTOR_ROLE_HEADER,
    ANONYMOUS_ACTOR_ID,
    DEFAULT_ACTOR_ROLE,
)
from ...core.enums import RequestSource, RoleName
from ...core.exceptions import ValidationException


def get_request_context(request: Request) -> RequestContext:
    actor_id = request.headers.get(ACTOR_ID_HEADER) or ANONYMOUS_ACTOR_ID
    raw_role = (request.headers.get(ACTOR_ROLE_HEADER) or DEFAULT_ACTOR_ROLE).upper()
    try:
        role = RoleName(raw_role)
    except ValueError as exc:
        raise ValidationException(
            f"Unknown role {raw_role}",
            code="INVALID_ROLE",
            details={"role": raw_role},
        ) from exc

    return create_context(
        actor_id=actor_id,
        role=role,
        source=RequestSource.API,
        request_id=getattr(request.state, "request_id", None),
    )
