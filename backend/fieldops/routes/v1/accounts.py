# backend/fieldops/routes/v1/accounts.py
"""
Account routes - API v1

Endpoints:
    POST /                     → Create an account with primary contact and address
    GET /{account_id}          → Account details
    PATCH /{account_id}/status → Change lifecycle status
"""

from fastapi import APIRouter, Depends, Response, status

from ...api.dependencies import get_account_service, get_request_context
from ...context import RequestContext
from ...core.exceptions import EventDispatchError
from ...schemas.account import AccountCreate, AccountResponse, AccountStatusUpdate
from ...services.account_service import AccountService
from ._results import mark_propagation_incomplete, unwrap_or_raise

router = APIRouter(tags=["accounts-v1"])


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    payload: AccountCreate,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    try:
        result = await service.create_account(ctx, payload)
    except EventDispatchError as exc:
        if exc.committed_entity is None:
            raise
        mark_propagation_incomplete(response)
        return AccountResponse.model_validate(exc.committed_entity)

    return AccountResponse.model_validate(unwrap_or_raise(result))


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    result = await service.get_account(ctx, account_id)
    return AccountResponse.model_validate(unwrap_or_raise(result))


@router.patch("/{account_id}/status", response_model=AccountResponse)
async def update_account_status(
    account_id: str,
    payload: AccountStatusUpdate,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    try:
        result = await service.update_account_status(ctx, account_id, payload.status)
    except EventDispatchError as exc:
        if exc.committed_entity is None:
            raise
        mark_propagation_incomplete(response)
        return AccountResponse.model_validate(exc.committed_entity)

    return AccountResponse.model_validate(unwrap_or_raise(result))
