"""
Capability-based authorization gate.

Every service checks the acting role against a static role -> capability
mapping before doing any state-mutating work. The check is pure: no I/O,
no side effects.
"""

from typing import Dict, FrozenSet, Optional

from ..context import RequestContext
from ..core.enums import Capability, RoleName
from ..core.exceptions import AuthorizationError
from ..core.results import Err, Ok, Result

ROLE_CAPABILITIES: Dict[RoleName, FrozenSet[Capability]] = {
    RoleName.ADMIN: frozenset(Capability),
    RoleName.CSR: frozenset(
        {
            Capability.VIEW_ACCOUNTS,
            Capability.CREATE_ACCOUNTS,
            Capability.MANAGE_ACCOUNTS,
            Capability.VIEW_JOBS,
            Capability.SCHEDULE_VISITS,
            Capability.VIEW_SCHEDULE,
        }
    ),
    RoleName.TECHNICIAN: frozenset(
        {
            Capability.VIEW_JOBS,
            Capability.VIEW_SCHEDULE,
            Capability.COMPLETE_VISITS,
        }
    ),
}


def capabilities_for(role: RoleName) -> FrozenSet[Capability]:
    return ROLE_CAPABILITIES.get(role, frozenset())


def has_capability(ctx: RequestContext, capability: Capability) -> bool:
    return capability in capabilities_for(ctx.actor.role)


def check_capability(
    ctx: RequestContext, capability: Capability
) -> Result[None, AuthorizationError]:
    """Result-typed capability check used by services."""
    if has_capability(ctx, capability):
        return Ok(None)
    return Err(AuthorizationError.missing_capability(capability.value, ctx.actor.id))


def require_capability(ctx: RequestContext, capability: Capability) -> None:
    """
    Raise unless the actor's role grants ``capability``.

    Raises:
        AuthorizationError: details carry ``required`` and ``actor``
    """
    result = check_capability(ctx, capability)
    if not result.ok:
        raise result.error


def check_resource_access(
    ctx: RequestContext,
    resource_type: str,
    resource_id: str,
    owner_id: Optional[str],
) -> Result[None, AuthorizationError]:
    """
    Resource-level check: technicians may only act on resources they own.

    Other roles pass; their access is governed by capabilities alone.
    """
    if ctx.actor.role != RoleName.TECHNICIAN or owner_id == ctx.actor.id:
        return Ok(None)
    return Err(AuthorizationError.resource_access(resource_type, resource_id))
