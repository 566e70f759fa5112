# backend/fieldops/models/user.py
"""
User model for FieldOps.

Users are staff members: administrators, customer service representatives
and field technicians. Authentication happens upstream; this table only
records identity and role so visits can reference their technician.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import RoleName
from ..database import Base
from .types import TimestampMixin

if TYPE_CHECKING:
    from .visit import Visit


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=RoleName.TECHNICIAN.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'CSR', 'TECHNICIAN')", name="ck_users_role"),
    )

    visits: Mapped[List["Visit"]] = relationship("Visit", back_populates="technician")

    @property
    def is_technician(self) -> bool:
        return self.role == RoleName.TECHNICIAN.value

    def __repr__(self) -> str:
        return f"<User {self.id} role={self.role}>"
