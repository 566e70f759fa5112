"""Account Repository for FieldOps."""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.constants import ACCOUNT_NUMBER_PREFIX, ACCOUNT_NUMBER_WIDTH
from ..core.exceptions import RepositoryException
from ..models.account import Account, AccountAddress, AccountContact
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AccountRepository(BaseRepository[Account]):
    def __init__(self, db: Session):
        super().__init__(db, Account)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Account.contacts), selectinload(Account.addresses))

    def next_account_number(self) -> str:
        """Next sequential number, e.g. ``ACC-00001`` for the first account."""
        try:
            total = self.db.query(func.count(Account.id)).scalar() or 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting accounts: {str(e)}")
            raise RepositoryException(f"Failed to generate account number: {str(e)}")
        return f"{ACCOUNT_NUMBER_PREFIX}-{total + 1:0{ACCOUNT_NUMBER_WIDTH}d}"

    def create_with_primary_details(
        self,
        *,
        account_number: str,
        account_type: str,
        status: str,
        tax_exempt: bool,
        created_by: str,
        contact: dict,
        address: dict,
    ) -> Account:
        """Create an account together with its primary contact and address."""
        account = self.create(
            account_number=account_number,
            account_type=account_type,
            status=status,
            tax_exempt=tax_exempt,
            created_by=created_by,
        )
        account.contacts.append(AccountContact(is_primary=True, **contact))
        account.addresses.append(AccountAddress(is_primary=True, **address))
        self.db.flush()
        return account

    def update_status(self, account_id: str, status: str) -> Optional[Account]:
        return self.update(account_id, status=status)
