"""Work orders raised against an account."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import JobStatus
from ..database import Base
from .types import TimestampMixin

if TYPE_CHECKING:
    from .account import Account
    from .visit import Visit


class Job(TimestampMixin, Base):
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    account_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=JobStatus.OPEN.value)

    account: Mapped["Account"] = relationship("Account", back_populates="jobs")
    visits: Mapped[List["Visit"]] = relationship(
        "Visit", back_populates="job", order_by="Visit.start_time", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Job {self.id} status={self.status}>"
