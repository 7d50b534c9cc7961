"""Pydantic schemas for customer order links."""

from __future__ import annotations

from pydantic import BaseModel


class OrderLinkResponse(BaseModel):
    success: bool = True
    url: str
    target_id: int
