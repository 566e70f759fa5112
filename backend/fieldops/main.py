# backend/fieldops/main.py
"""
FieldOps API application factory.

Builds the process-wide collaborators (event dispatcher, technician lock
registry) exactly once per application and hands them to services
through ``app.state``.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from . import __version__
from .core.config import settings
from .core.exceptions import DomainException
from .core.logging_config import configure_logging
from .core.technician_lock import TechnicianLockRegistry
from .database import SessionLocal, init_db
from .events import EventDispatcher, register_default_handlers
from .middleware.request_context import RequestContextMiddleware
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import accounts as accounts_v1, jobs as jobs_v1, visits as visits_v1

logger = logging.getLogger(__name__)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.error(f"Unhandled domain error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )


def create_app(
    session_factory: Optional[sessionmaker[Session]] = None,
    *,
    dispatcher: Optional[EventDispatcher] = None,
    technician_locks: Optional[TechnicianLockRegistry] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        session_factory: Factory services open their sessions from (default: SessionLocal)
        dispatcher: Event dispatcher; a new one with the default handlers when omitted
        technician_locks: Shared schedule lock registry
    """
    configure_logging()
    factory = session_factory or SessionLocal

    if dispatcher is None:
        dispatcher = EventDispatcher(timeout_seconds=settings.event_dispatch_timeout_seconds)
        register_default_handlers(dispatcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_db(factory.kw["bind"])
        logger.info(f"{settings.app_name} started (environment={settings.environment})")
        yield

    app = FastAPI(title=f"{settings.app_name} API", version=__version__, lifespan=lifespan)
    app.state.session_factory = factory
    app.state.event_dispatcher = dispatcher
    app.state.technician_locks = technician_locks or TechnicianLockRegistry()

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(DomainException, domain_exception_handler)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(visits_v1.router, prefix="/visits")
    api_v1.include_router(jobs_v1.router, prefix="/jobs")
    api_v1.include_router(accounts_v1.router, prefix="/accounts")
    app.include_router(api_v1)

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return app


app = create_app()
