"""Pydantic schemas for login and the session cookie."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from restopos.core.permissions import Page
from restopos.schemas.account import AccountRead


class LoginRequest(BaseModel):
    # Defaults let the auth service report missing fields itself.
    userid: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    success: bool = True
    user: AccountRead


class SessionUser(BaseModel):
    """Identity carried in the session cookie."""

    id: int
    userid: str
    # Raw role string; an unrecognised role simply has no pages.
    role: str
    name: str | None = Field(default=None, alias="Name")

    model_config = ConfigDict(populate_by_name=True)


class SessionResponse(BaseModel):
    success: bool = True
    user: SessionUser
    pages: list[Page]
