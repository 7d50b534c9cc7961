"""
Auth endpoints — login, logout and the current session.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restopos.api.deps import get_session_factory
from restopos.api.session import SessionCorrupt, session_store
from restopos.core.config import settings
from restopos.core.exceptions import NotAuthenticatedError
from restopos.core.permissions import Page, pages_for
from restopos.schemas.account import SuccessResponse
from restopos.schemas.auth import LoginRequest, LoginResponse, SessionResponse
from restopos.services.auth import authenticate

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    session_factory: async_sessionmaker[AsyncSession] | None = Depends(get_session_factory),
) -> LoginResponse:
    """Check userid/password; on success return the account and set the session cookie."""
    logger.info("Login attempt for userid %r", body.userid)
    user = await authenticate(session_factory, body.userid, body.password)
    session_store.write(response, user)
    return LoginResponse(user=user)


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response) -> SuccessResponse:
    """Clear the session cookie."""
    session_store.clear(response)
    return SuccessResponse()


@router.get("/session", response_model=SessionResponse)
async def read_session(request: Request):
    """Current session user and the pages their role may open."""
    try:
        user = session_store.read(request)
    except SessionCorrupt:
        logger.info("Discarding unreadable session cookie")
        user = None

    if user is None:
        failed = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": NotAuthenticatedError.message},
        )
        session_store.clear(failed)
        return failed

    allowed = pages_for(user.role)
    return SessionResponse(user=user, pages=[p for p in Page if p in allowed])
