"""Customer accounts with their primary contact and service address."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import AccountStatus, AccountType
from ..database import Base
from .types import TimestampMixin

if TYPE_CHECKING:
    from .job import Job


class Account(TimestampMixin, Base):
    """A billable customer. ``account_number`` is human-facing (ACC-00001)."""

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    account_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    account_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AccountType.RESIDENTIAL.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AccountStatus.ACTIVE.value
    )
    tax_exempt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)

    contacts: Mapped[List["AccountContact"]] = relationship(
        "AccountContact", back_populates="account", cascade="all, delete-orphan", lazy="selectin"
    )
    addresses: Mapped[List["AccountAddress"]] = relationship(
        "AccountAddress", back_populates="account", cascade="all, delete-orphan", lazy="selectin"
    )
    jobs: Mapped[List["Job"]] = relationship("Job", back_populates="account")

    def __repr__(self) -> str:
        return f"<Account {self.account_number} status={self.status}>"


class AccountContact(Base):
    __tablename__ = "account_contacts"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    account_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    account: Mapped["Account"] = relationship("Account", back_populates="contacts")


class AccountAddress(Base):
    __tablename__ = "account_addresses"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    account_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    street1: Mapped[str] = mapped_column(String(255), nullable=False)
    street2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    account: Mapped["Account"] = relationship("Account", back_populates="addresses")
