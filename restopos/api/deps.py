"""
FastAPI dependencies — database session, session cookie and route guards.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restopos.api.session import SessionCorrupt, session_store
from restopos.core.config import settings
from restopos.core.exceptions import (
    ForbiddenError,
    LoginRequired,
    NotAuthenticatedError,
    PageForbidden,
    StoreError,
)
from restopos.core.permissions import Page, can_access
from restopos.db.session import async_session_factory
from restopos.schemas.auth import SessionUser

logger = logging.getLogger(__name__)


# ── Database session ────────────────────────────────────────────────
def get_session_factory() -> async_sessionmaker[AsyncSession] | None:
    """The configured session factory, or ``None`` in degraded mode."""
    return async_session_factory


async def get_db(
    factory: async_sessionmaker[AsyncSession] | None = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    if factory is None:
        logger.error("Credential store is not configured")
        raise StoreError()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Route guards ────────────────────────────────────────────────────
def require_page(page: Page) -> Callable[[Request], Awaitable[SessionUser]]:
    """Guard for HTML pages: redirect to login, or show a blocking notice.

    Runs once per page request; a role change elsewhere only takes effect
    on the next navigation.
    """

    async def _guard(request: Request) -> SessionUser:
        try:
            user = session_store.read(request)
        except SessionCorrupt:
            raise LoginRequired(clear_cookie=True) from None
        if user is None:
            raise LoginRequired()
        if not can_access(user.role, page):
            logger.warning("Role %s denied page %s (userid %r)", user.role, page.value, user.userid)
            raise PageForbidden(page.value)
        return user

    return _guard


def require_api_page(page: Page) -> Callable[[Request], Awaitable[SessionUser]]:
    """Same check as ``require_page`` but answering with JSON 401 / 403."""

    async def _guard(request: Request) -> SessionUser:
        try:
            user = session_store.read(request)
        except SessionCorrupt:
            user = None
        if user is None:
            raise NotAuthenticatedError()
        if not can_access(user.role, page):
            logger.warning("Role %s denied API for page %s (userid %r)", user.role, page.value, user.userid)
            raise ForbiddenError()
        return user

    return _guard


_require_users_api = require_api_page(Page.USERS)


async def guard_admin_api(request: Request) -> SessionUser | None:
    """Account admin API gate.

    Open unless ADMIN_API_REQUIRES_OWNER is set, in which case the caller
    needs a session whose role may open the users page.
    """
    if not settings.ADMIN_API_REQUIRES_OWNER:
        return None
    return await _require_users_api(request)
