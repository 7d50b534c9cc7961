"""
Session store — the logged-in account held in a signed, durable cookie.

The server keeps no session table; the cookie is the only copy. All cookie
access goes through ``CookieSessionStore`` (read / write / clear).
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import Request, Response
from pydantic import ValidationError as PydanticValidationError

from restopos.core.config import Settings, settings
from restopos.core.security import create_session_token, decode_session_token
from restopos.schemas.account import AccountRead
from restopos.schemas.auth import SessionUser

logger = logging.getLogger(__name__)


class SessionCorrupt(Exception):
    """A session cookie is present but cannot be trusted or parsed."""


class CookieSessionStore:
    def __init__(self, cookie_name: str, max_age: timedelta, secure: bool) -> None:
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    @classmethod
    def from_settings(cls, config: Settings) -> "CookieSessionStore":
        return cls(
            cookie_name=config.SESSION_COOKIE_NAME,
            max_age=timedelta(days=config.SESSION_MAX_AGE_DAYS),
            secure=config.COOKIE_SECURE,
        )

    def read(self, request: Request) -> SessionUser | None:
        """Return the session user, ``None`` if there is no cookie.

        Raises SessionCorrupt for a bad signature, an expired token or
        claims that do not describe a valid user.
        """
        token = request.cookies.get(self.cookie_name)
        if not token:
            return None

        payload = decode_session_token(token)
        if payload is None:
            raise SessionCorrupt("undecodable session token")

        try:
            return SessionUser.model_validate(
                {
                    "id": payload.get("sub"),
                    "userid": payload.get("userid"),
                    "role": payload.get("role"),
                    "Name": payload.get("Name"),
                }
            )
        except PydanticValidationError as exc:
            raise SessionCorrupt("invalid session claims") from exc

    def write(self, response: Response, user: AccountRead) -> None:
        token = create_session_token(
            {"sub": str(user.id), "userid": user.userid, "role": user.role, "Name": user.name},
            expires_delta=self.max_age,
        )
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            httponly=True,
            secure=self.secure,
            samesite="lax",
            max_age=int(self.max_age.total_seconds()),
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(self.cookie_name)


session_store = CookieSessionStore.from_settings(settings)
