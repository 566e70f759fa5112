"""Request context construction."""

from .factory import create_betty_context, create_context, create_system_context, derive_actor_type
from .models import Actor, RequestContext

__all__ = [
    "Actor",
    "RequestContext",
    "create_context",
    "create_betty_context",
    "create_system_context",
    "derive_actor_type",
]
