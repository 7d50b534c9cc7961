"""Pydantic schemas for account CRUD. No schema here carries a stored password."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AccountRead(BaseModel):
    """Sanitized account, safe to return to any client."""

    id: int
    userid: str
    role: str
    name: str | None = Field(default=None, alias="Name")
    created_at: datetime | None = None
    access_time: datetime | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AccountCreate(BaseModel):
    userid: str
    password: str
    role: str
    name: str | None = Field(default=None, alias="Name")

    model_config = ConfigDict(populate_by_name=True)


class AccountUpdate(BaseModel):
    id: int
    userid: str
    # Blank or missing keeps the stored password.
    password: str | None = None
    role: str
    name: str | None = Field(default=None, alias="Name")

    model_config = ConfigDict(populate_by_name=True)


class AccountDelete(BaseModel):
    id: int


class AccountListResponse(BaseModel):
    success: bool = True
    data: list[AccountRead]


class SuccessResponse(BaseModel):
    success: bool = True
