"""
Error taxonomy and global exception handlers.

Every error leaves the app as ``{"success": false, "error": <message>}``
with a status code reflecting its category. Stack traces never reach clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from restopos.core.config import settings

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class PosError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(PosError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Please fill in all required fields"


class ConflictError(PosError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "This user ID already exists"


class NotFoundError(PosError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class UserNotFoundError(NotFoundError):
    """No usable account for a login attempt (also covers store failures)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "User not found or user ID is incorrect"


class InvalidPasswordError(PosError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect password"


class NotAuthenticatedError(PosError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not logged in"


class ForbiddenError(PosError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You do not have permission to access this resource"


class StoreError(PosError):
    message = "Internal database error"


# ── Route guard signals (HTML pages) ────────────────────────────────
class LoginRequired(Exception):
    """No usable session; send the browser to the login page."""

    def __init__(self, clear_cookie: bool = False) -> None:
        self.clear_cookie = clear_cookie
        super().__init__("login required")


class PageForbidden(Exception):
    """Authenticated, but the role may not open this page."""

    def __init__(self, page: str) -> None:
        self.page = page
        super().__init__(f"forbidden: {page}")


_FORBIDDEN_PAGE = """<!doctype html>
<html lang="th">
<head>
<meta charset="utf-8">
<meta http-equiv="refresh" content="3;url=/">
<title>Access denied</title>
</head>
<body>
<main>
<h2>Access denied</h2>
<p>You do not have permission to access this page.</p>
<a href="/">Back to home</a>
</main>
</body>
</html>
"""


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


# ── Handlers ────────────────────────────────────────────────────────
async def _pos_error_handler(_request: Request, exc: PosError) -> JSONResponse:
    return _envelope(exc.status_code, exc.message)


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug("Request validation failed: %s", exc.errors())
    return _envelope(status.HTTP_400_BAD_REQUEST, ValidationError.message)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail))


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded: %s", exc.detail)
    return _envelope(status.HTTP_429_TOO_MANY_REQUESTS, "Too many requests, try again later")


async def _login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    if exc.clear_cookie:
        logger.info("Cleared unreadable session cookie on %s", request.url.path)
        response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


async def _page_forbidden_handler(_request: Request, exc: PageForbidden) -> HTMLResponse:
    return HTMLResponse(_FORBIDDEN_PAGE, status_code=status.HTTP_403_FORBIDDEN)


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, StoreError.message)


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, PosError.message)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(PosError, _pos_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(LoginRequired, _login_required_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PageForbidden, _page_forbidden_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
