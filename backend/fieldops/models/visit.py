# backend/fieldops/models/visit.py
"""
Visit model: one technician on site for one job during a time interval.

Intervals are half-open, ``[start_time, end_time)``. A visit ending at
10:00 and another starting at 10:00 for the same technician do not
overlap. The no-overlap rule is enforced by the scheduling service
(see ConflictChecker); the table only guarantees ``start_time < end_time``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..database import Base
from .types import TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from .job import Job
    from .user import User


class Visit(TimestampMixin, Base):
    """
    Scheduled technician visit.

    Attributes:
        id: ULID primary key
        job_id: Job the visit works on
        technician_id: Assigned technician (users.id)
        start_time: Inclusive start, UTC
        end_time: Exclusive end, UTC
        summary: Work summary, set when the visit is completed
    """

    __tablename__ = "visits"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    job_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    technician_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id"), nullable=False
    )
    start_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_visit_time_order"),
        Index("ix_visits_technician_start", "technician_id", "start_time"),
    )

    job: Mapped["Job"] = relationship("Job", back_populates="visits")
    technician: Mapped["User"] = relationship("User", back_populates="visits")

    def __repr__(self) -> str:
        return (
            f"<Visit {self.id} technician={self.technician_id} "
            f"{self.start_time.isoformat()}-{self.end_time.isoformat()}>"
        )
