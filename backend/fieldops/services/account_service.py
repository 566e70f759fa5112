"""
Account Service for FieldOps

Creates customer accounts with their primary contact and address, reads
them back, and moves them through their lifecycle statuses. Every write
announces itself through the event dispatcher once committed.
"""

from __future__ import annotations

import logging
from typing import Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ..context import RequestContext
from ..core.enums import AccountStatus, Capability
from ..core.exceptions import AuthorizationError, ConflictError, EventDispatchError, NotFoundException
from ..core.results import Err, Ok, Result
from ..events import (
    AccountCreatedPayload,
    AccountStatusChangedPayload,
    EventDispatcher,
    EventPayload,
    EventType,
)
from ..models.account import Account
from ..repositories.account_repository import AccountRepository
from ..schemas.account import AccountCreate
from .authorization import check_capability
from .base import BaseService

logger = logging.getLogger(__name__)

AccountResult = Result[Account, Union[AuthorizationError, NotFoundException]]


class AccountService(BaseService):
    def __init__(self, session_factory: sessionmaker[Session], dispatcher: EventDispatcher):
        super().__init__(session_factory)
        self.dispatcher = dispatcher

    @BaseService.measure_operation("get_account")
    async def get_account(self, ctx: RequestContext, account_id: str) -> AccountResult:
        allowed = check_capability(ctx, Capability.VIEW_ACCOUNTS)
        if not allowed.ok:
            return allowed

        account = await self.run_db(
            "get_account", lambda session: AccountRepository(session).get_by_id(account_id)
        )
        if account is None:
            return Err(_account_not_found(account_id))
        return Ok(account)

    @BaseService.measure_operation("create_account")
    async def create_account(
        self, ctx: RequestContext, data: AccountCreate
    ) -> Result[Account, AuthorizationError]:
        """
        Create an ACTIVE account numbered ``ACC-NNNNN`` and emit account.created.

        Raises:
            ConflictError: If the generated account number is already taken
            EventDispatchError: If an account.created handler failed (account is kept)
        """
        allowed = check_capability(ctx, Capability.CREATE_ACCOUNTS)
        if not allowed.ok:
            return allowed

        self.log_operation("create_account", request_id=ctx.request_id)
        account = await self.run_db(
            "create_account", lambda session: _insert_account(session, ctx, data)
        )
        self.logger.info(f"Created account {account.account_number} ({account.id})")

        await self._emit(
            ctx,
            EventType.ACCOUNT_CREATED,
            AccountCreatedPayload(account_id=account.id, account_number=account.account_number),
            account,
        )
        return Ok(account)

    @BaseService.measure_operation("update_account_status")
    async def update_account_status(
        self, ctx: RequestContext, account_id: str, status: AccountStatus
    ) -> AccountResult:
        """
        Move an account to ``status`` and emit account.status_changed.

        Raises:
            EventDispatchError: If a handler failed (status change is kept)
        """
        allowed = check_capability(ctx, Capability.MANAGE_ACCOUNTS)
        if not allowed.ok:
            return allowed

        self.log_operation(
            "update_account_status",
            account_id=account_id,
            status=status.value,
            request_id=ctx.request_id,
        )
        account = await self.run_db(
            "update_account_status",
            lambda session: AccountRepository(session).update_status(account_id, status.value),
        )
        if account is None:
            return Err(_account_not_found(account_id))

        await self._emit(
            ctx,
            EventType.ACCOUNT_STATUS_CHANGED,
            AccountStatusChangedPayload(account_id=account.id, status=status),
            account,
        )
        return Ok(account)

    async def _emit(
        self,
        ctx: RequestContext,
        event_type: EventType,
        payload: EventPayload,
        committed: Account,
    ) -> None:
        try:
            await self.dispatcher.emit(ctx, event_type, payload)
        except EventDispatchError as exc:
            exc.committed_entity = committed
            raise


def _account_not_found(account_id: str) -> NotFoundException:
    return NotFoundException(
        f"Account {account_id} not found",
        code="ACCOUNT_NOT_FOUND",
        details={"account_id": account_id},
    )


def _insert_account(session: Session, ctx: RequestContext, data: AccountCreate) -> Account:
    accounts = AccountRepository(session)
    account_number = accounts.next_account_number()
    try:
        return accounts.create_with_primary_details(
            account_number=account_number,
            account_type=data.account_type.value,
            status=AccountStatus.ACTIVE.value,
            tax_exempt=data.tax_exempt,
            created_by=ctx.actor.id,
            contact={
                "first_name": data.customer.first_name,
                "last_name": data.customer.last_name,
                "email": str(data.email),
                "phone": data.phone,
            },
            address=data.address.model_dump(),
        )
    except IntegrityError as exc:
        raise ConflictError.duplicate_resource("account", account_number) from exc
