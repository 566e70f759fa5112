"""Application-wide constants for the FieldOps platform."""

from __future__ import annotations

BRAND_NAME = "FieldOps"

# Fixed actor identities
SYSTEM_ACTOR_ID = "system"
BETTY_ACTOR_ID = "betty-ai"
ANONYMOUS_ACTOR_ID = "anonymous"

# Tracing
REQUEST_ID_HEADER = "X-Request-ID"
EVENT_PROPAGATION_HEADER = "X-Event-Propagation"

# Account numbering
ACCOUNT_NUMBER_PREFIX = "ACC"
ACCOUNT_NUMBER_WIDTH = 5

# Query limits
DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 1000

# Identity forwarded by the upstream authentication gateway
ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_ROLE_HEADER = "X-Actor-Role"
DEFAULT_ACTOR_ROLE = "CSR"
