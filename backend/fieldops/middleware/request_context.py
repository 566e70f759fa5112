# backend/fieldops/middleware/request_context.py
"""
Request tracing middleware.

- Propagates the caller's X-Request-ID or generates a ULID
- Exposes request id and actor id to log records via contextvars
- Echoes the request id on every response
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.constants import ACTOR_ID_HEADER, ANONYMOUS_ACTOR_ID, REQUEST_ID_HEADER
from ..core.request_context import reset_actor_id, reset_request_id, set_actor_id, set_request_id
from ..core.ulid_helper import generate_ulid


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_ulid()
        request.state.request_id = request_id

        request_token = set_request_id(request_id)
        actor_token = set_actor_id(request.headers.get(ACTOR_ID_HEADER) or ANONYMOUS_ACTOR_ID)
        start_time = time.time()
        try:
            response = await call_next(request)
        finally:
            reset_actor_id(actor_token)
            reset_request_id(request_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-MS"] = str(int((time.time() - start_time) * 1000))
        return response
