# backend/tests/conftest.py
"""
Pytest configuration for FieldOps.

Every test gets its own SQLite file under ``tmp_path`` so sessions used
from worker threads (asyncio.to_thread) see committed data the same way
separate connections would in production.
"""

import os

# Set testing mode BEFORE any fieldops imports
os.environ["is_testing"] = "true"

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Callable, Generator, List

import pytest
from sqlalchemy.orm import Session, sessionmaker

from fieldops import models  # noqa: F401  (registers tables)
from fieldops.context import RequestContext, create_context
from fieldops.core.enums import AccountStatus, AccountType, RequestSource, RoleName
from fieldops.core.technician_lock import TechnicianLockRegistry
from fieldops.database import Base, create_db_engine, create_session_factory
from fieldops.events import DomainEvent, EventDispatcher, EventType
from fieldops.models import Account, Job, User
from fieldops.schemas.visit import VisitCreate

# A Monday far enough ahead that every seeded visit is "upcoming"
SCHEDULE_DAY = datetime(2031, 1, 6, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'fieldops-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return EventDispatcher()


@pytest.fixture
def technician_locks() -> TechnicianLockRegistry:
    return TechnicianLockRegistry()


@pytest.fixture
def recorded_events(dispatcher) -> List[DomainEvent]:
    """Every core event delivered through ``dispatcher``, in delivery order."""
    events: List[DomainEvent] = []

    async def record(event: DomainEvent) -> None:
        events.append(event)

    for event_type in EventType:
        dispatcher.on(event_type, record)
    return events


@pytest.fixture
def seed(db) -> SimpleNamespace:
    """Two technicians, a CSR, one account and one job."""
    tech_a = User(name="Tina Tech", email="tina@example.com", role=RoleName.TECHNICIAN.value)
    tech_b = User(name="Tom Tech", email="tom@example.com", role=RoleName.TECHNICIAN.value)
    csr = User(name="Casey Rep", email="casey@example.com", role=RoleName.CSR.value)
    account = Account(
        account_number="ACC-90000",
        account_type=AccountType.RESIDENTIAL.value,
        status=AccountStatus.ACTIVE.value,
        created_by="seed",
    )
    db.add_all([tech_a, tech_b, csr, account])
    db.flush()
    job = Job(account_id=account.id, title="Replace water heater")
    db.add(job)
    db.commit()
    return SimpleNamespace(
        tech_a_id=tech_a.id,
        tech_b_id=tech_b.id,
        csr_id=csr.id,
        account_id=account.id,
        job_id=job.id,
    )


@pytest.fixture
def admin_ctx() -> RequestContext:
    return create_context("admin-1", RoleName.ADMIN, RequestSource.API)


@pytest.fixture
def csr_ctx(seed) -> RequestContext:
    return create_context(seed.csr_id, RoleName.CSR, RequestSource.API)


@pytest.fixture
def tech_ctx(seed) -> RequestContext:
    return create_context(seed.tech_a_id, RoleName.TECHNICIAN, RequestSource.API)


@pytest.fixture
def visit_request(seed) -> Callable[..., VisitCreate]:
    """Build a VisitCreate for the seeded job; defaults to technician A."""

    def build(start_hour: float, end_hour: float, technician_id: str = "") -> VisitCreate:
        return VisitCreate(
            job_id=seed.job_id,
            technician_id=technician_id or seed.tech_a_id,
            start_time=SCHEDULE_DAY + timedelta(hours=start_hour),
            end_time=SCHEDULE_DAY + timedelta(hours=end_hour),
        )

    return build
