"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fieldops.core.config import settings

logger = logging.getLogger(__name__)


def _build_engine_kwargs(db_url: str) -> dict[str, Any]:
    """Pool settings for server databases; SQLite gets thread-shareable connections."""
    if db_url.startswith("sqlite"):
        # Sessions are driven from worker threads via asyncio.to_thread
        return {"connect_args": {"check_same_thread": False}, "future": True}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_pre_ping": True,
        "future": True,
    }


def create_db_engine(db_url: str) -> Engine:
    engine = create_engine(db_url, **_build_engine_kwargs(db_url))

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        logger.debug("Database connection established")

    return engine


def create_session_factory(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, expire_on_commit=False)


engine: Engine = create_db_engine(settings.database_url)

SessionLocal = create_session_factory(engine)

Base = declarative_base()


def init_db(bind: Engine) -> None:
    """Create any missing tables for the registered models."""
    from .. import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured")
