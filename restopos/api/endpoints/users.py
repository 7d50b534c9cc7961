"""
Account admin endpoints — list, create, update and delete staff accounts.

By default these are reachable without a session (see
``ADMIN_API_REQUIRES_OWNER`` in the settings).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.api.deps import get_db, guard_admin_api
from restopos.schemas.account import (
    AccountCreate,
    AccountDelete,
    AccountListResponse,
    AccountUpdate,
    SuccessResponse,
)
from restopos.services import accounts

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(guard_admin_api)])


@router.get("", response_model=AccountListResponse)
async def list_users(db: AsyncSession = Depends(get_db)) -> AccountListResponse:
    """All accounts, newest first (passwords never included)."""
    return AccountListResponse(data=await accounts.list_accounts(db))


@router.post("", response_model=SuccessResponse)
async def create_user(body: AccountCreate, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    await accounts.create_account(db, body)
    return SuccessResponse()


@router.put("", response_model=SuccessResponse)
async def update_user(body: AccountUpdate, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    """Blank password keeps the current one."""
    await accounts.update_account(db, body)
    return SuccessResponse()


@router.delete("", response_model=SuccessResponse)
async def delete_user(body: AccountDelete, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    await accounts.delete_account(db, body.id)
    return SuccessResponse()
