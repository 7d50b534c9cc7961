"""
Password hashing, credential verification and session token signing.

Stored passwords come in two formats: bcrypt hashes (``$2b$`` prefix) and
legacy plain text. Each format has a verifier; ``select_verifier`` picks one
by inspecting the stored value, so call sites never branch on the format.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from restopos.core.config import settings

BCRYPT_MARKER = "$2b$"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
    bcrypt__ident="2b",
)


# ── Passwords ───────────────────────────────────────────────────────
def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


class CredentialVerifier:
    """Checks a supplied password against one stored password format."""

    name = "base"

    def handles(self, stored: str) -> bool:
        raise NotImplementedError

    def verify(self, supplied: str, stored: str) -> bool:
        raise NotImplementedError


class BcryptVerifier(CredentialVerifier):
    name = "bcrypt"

    def handles(self, stored: str) -> bool:
        return stored.startswith(BCRYPT_MARKER)

    def verify(self, supplied: str, stored: str) -> bool:
        try:
            return pwd_context.verify(supplied, stored)
        except (ValueError, TypeError):
            return False


class PlainTextVerifier(CredentialVerifier):
    """Legacy rows: exact string equality, no trimming or case folding."""

    name = "plain"

    def handles(self, stored: str) -> bool:
        return True

    def verify(self, supplied: str, stored: str) -> bool:
        return supplied == stored


# Checked in order; the plain-text verifier accepts anything and must stay last.
VERIFIERS: tuple[CredentialVerifier, ...] = (BcryptVerifier(), PlainTextVerifier())


def select_verifier(stored: str) -> CredentialVerifier:
    for verifier in VERIFIERS:
        if verifier.handles(stored):
            return verifier
    raise LookupError("no verifier for stored password")  # pragma: no cover


def verify_password(supplied: str, stored: str | None) -> bool:
    if stored is None:
        return False
    return select_verifier(stored).verify(supplied, stored)


# ── Session tokens ──────────────────────────────────────────────────
def create_session_token(
    claims: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a sanitized account as a session token for the session cookie."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.SESSION_MAX_AGE_DAYS)
    )
    return jwt.encode(
        {**claims, "exp": expire, "type": "session"},
        settings.SESSION_SECRET.get_secret_value(),
        algorithm=settings.SESSION_ALGORITHM,
    )


def decode_session_token(token: str) -> dict | None:
    """Return payload dict if the session token is valid, else ``None``."""
    try:
        payload = jwt.decode(
            token,
            settings.SESSION_SECRET.get_secret_value(),
            algorithms=[settings.SESSION_ALGORITHM],
        )
    except JWTError:
        return None
    if payload.get("type") != "session":
        return None
    return payload
