"""
Account admin operations — list / create / update / delete staff accounts.

Uniqueness of ``userid`` is checked with a read first (for a clear message)
and enforced by the table's UNIQUE constraint; a constraint violation on
write is reported as the same conflict. These operations do not check who
is calling; gating is the caller's job.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import ConflictError, ValidationError
from restopos.core.permissions import LOGIN_ROLES, Role, parse_role
from restopos.core.security import get_password_hash
from restopos.models.account import Account
from restopos.schemas.account import AccountCreate, AccountRead, AccountUpdate

logger = logging.getLogger(__name__)


def _login_role(value: str) -> Role:
    role = parse_role(value)
    if role not in LOGIN_ROLES:
        raise ValidationError(f"Role {role.value!r} cannot be assigned to a staff account")
    return role


def _require_userid(userid: str) -> None:
    if not userid or not userid.strip():
        raise ValidationError()


async def _userid_taken(db: AsyncSession, userid: str, exclude_id: int | None = None) -> bool:
    stmt = select(Account.id).where(Account.userid == userid)
    if exclude_id is not None:
        stmt = stmt.where(Account.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.first() is not None


async def list_accounts(db: AsyncSession) -> list[AccountRead]:
    """All accounts, newest first. No pagination."""
    result = await db.execute(select(Account).order_by(Account.created_at.desc()))
    return [AccountRead.model_validate(a) for a in result.scalars().all()]


async def create_account(db: AsyncSession, data: AccountCreate) -> AccountRead:
    _require_userid(data.userid)
    if not data.password or not data.password.strip():
        raise ValidationError()
    role = _login_role(data.role)

    if await _userid_taken(db, data.userid):
        logger.warning("Create rejected: userid %r already exists", data.userid)
        raise ConflictError()

    account = Account(
        userid=data.userid,
        password=get_password_hash(data.password),
        role=role.value,
        name=data.name,
    )
    db.add(account)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Create lost a race on userid %r", data.userid)
        raise ConflictError() from None

    await db.refresh(account)
    logger.info("Created account %s (%s, role=%s)", account.id, account.userid, account.role)
    return AccountRead.model_validate(account)


async def update_account(db: AsyncSession, data: AccountUpdate) -> None:
    """Update an account; the password is only replaced when a non-blank one is given.

    Updating an id that does not exist changes nothing and is not an error.
    """
    _require_userid(data.userid)
    role = _login_role(data.role)

    if await _userid_taken(db, data.userid, exclude_id=data.id):
        logger.warning("Update of %s rejected: userid %r held by another account", data.id, data.userid)
        raise ConflictError()

    values: dict = {Account.userid: data.userid, Account.role: role.value}
    if "name" in data.model_fields_set:
        values[Account.name] = data.name
    password_changed = bool(data.password and data.password.strip())
    if password_changed:
        values[Account.password] = get_password_hash(data.password)

    try:
        await db.execute(update(Account).where(Account.id == data.id).values(values))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Update of %s lost a race on userid %r", data.id, data.userid)
        raise ConflictError() from None

    logger.info(
        "Updated account %s (password %s)",
        data.id,
        "changed" if password_changed else "kept",
    )


async def delete_account(db: AsyncSession, account_id: int) -> None:
    """Remove by id. Rows referencing the account are not checked."""
    await db.execute(delete(Account).where(Account.id == account_id))
    await db.commit()
    logger.info("Deleted account %s", account_id)
