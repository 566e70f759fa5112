"""Account schemas for FieldOps."""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from ..core.enums import AccountStatus, AccountType
from ._strict_base import StrictModel, StrictRequestModel


class CustomerName(StrictRequestModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class AddressInput(StrictRequestModel):
    street1: str = Field(..., min_length=1, max_length=255)
    street2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=2, max_length=50)
    zip_code: str = Field(..., min_length=3, max_length=20)


class AccountCreate(StrictRequestModel):
    """New account with its primary contact and service address."""

    account_type: AccountType = AccountType.RESIDENTIAL
    tax_exempt: bool = False
    customer: CustomerName
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=32)
    address: AddressInput


class AccountStatusUpdate(StrictRequestModel):
    status: AccountStatus


class AccountContactResponse(StrictModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    is_primary: bool


class AccountAddressResponse(StrictModel):
    id: str
    street1: str
    street2: Optional[str] = None
    city: str
    state: str
    zip_code: str
    is_primary: bool


class AccountResponse(StrictModel):
    id: str
    account_number: str
    account_type: AccountType
    status: AccountStatus
    tax_exempt: bool
    created_by: str
    created_at: Optional[datetime] = None
    contacts: List[AccountContactResponse] = Field(default_factory=list)
    addresses: List[AccountAddressResponse] = Field(default_factory=list)
