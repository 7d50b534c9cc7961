"""
Authentication service — validates a (userid, password) pair against the
credential store and returns the sanitized account.

An unknown userid, a duplicated userid and a store failure all surface as
``UserNotFoundError`` so login responses never reveal which one happened.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import MultipleResultsFound, NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restopos.core.exceptions import (
    InvalidPasswordError,
    UserNotFoundError,
    ValidationError,
)
from restopos.core.security import select_verifier
from restopos.models.account import Account
from restopos.schemas.account import AccountRead

logger = logging.getLogger(__name__)


async def _lookup(db: AsyncSession, userid: str) -> Account:
    try:
        result = await db.execute(select(Account).where(Account.userid == userid))
        return result.scalar_one()
    except NoResultFound:
        logger.info("Login rejected: no account for userid %r", userid)
    except MultipleResultsFound:
        logger.error("Credential store holds duplicate rows for userid %r", userid)
    except SQLAlchemyError:
        logger.error("Credential lookup failed for userid %r", userid, exc_info=True)
    raise UserNotFoundError()


async def _touch_access_time(db: AsyncSession, account_id: int, now: datetime) -> bool:
    """Record the login time. Failures are logged, never raised."""
    try:
        await db.execute(
            update(Account).where(Account.id == account_id).values(access_time=now)
        )
        await db.commit()
        return True
    except SQLAlchemyError:
        logger.warning("Could not update access_time for account %s", account_id, exc_info=True)
        await db.rollback()
        return False


async def authenticate(
    session_factory: async_sessionmaker[AsyncSession] | None,
    userid: str,
    password: str,
) -> AccountRead:
    """Check credentials and return the account without its password.

    Raises ValidationError for blank input (before touching the store),
    UserNotFoundError when no single account matches, and
    InvalidPasswordError when the password does not verify.
    """
    if not userid or not userid.strip() or not password or not password.strip():
        raise ValidationError()

    if session_factory is None:
        logger.error("Login attempted while the credential store is not configured")
        raise UserNotFoundError()

    async with session_factory() as db:
        account = await _lookup(db, userid)

        verifier = select_verifier(account.password or "")
        if not verifier.verify(password, account.password or ""):
            logger.info("Login rejected: wrong password for userid %r", userid)
            raise InvalidPasswordError()

        # Snapshot before writing so a failed update cannot expire the row.
        user = AccountRead.model_validate(account)
        now = datetime.now(timezone.utc)
        if await _touch_access_time(db, account.id, now):
            user.access_time = now

    logger.info("Login succeeded for userid %r (%s, %s password)", userid, user.role, verifier.name)
    return user
