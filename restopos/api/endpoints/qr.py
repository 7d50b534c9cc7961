"""
Customer order links and QR codes for tables and takeaway orders.

Open to any role that may use the table-selection page.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response

from restopos.api.deps import require_api_page
from restopos.core.permissions import Page
from restopos.schemas.order_link import OrderLinkResponse
from restopos.services.order_links import (
    render_qr_png,
    table_order_url,
    takeaway_order_url,
    takeaway_target_id,
)

router = APIRouter(
    prefix="/qr",
    tags=["qr"],
    dependencies=[Depends(require_api_page(Page.SELECT_TABLE))],
)


def _origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


def _png(url: str) -> Response:
    return Response(content=render_qr_png(url), media_type="image/png")


@router.get("/tables/{table_id}", response_model=OrderLinkResponse)
async def table_link(table_id: int, request: Request) -> OrderLinkResponse:
    return OrderLinkResponse(url=table_order_url(table_id, _origin(request)), target_id=table_id)


@router.get("/tables/{table_id}/image")
async def table_qr(table_id: int, request: Request) -> Response:
    return _png(table_order_url(table_id, _origin(request)))


@router.get("/takeaway", response_model=OrderLinkResponse)
async def takeaway_link(table_id: int | None = Query(default=None)) -> OrderLinkResponse:
    """Takeaway orders without a table point at the default takeaway table."""
    return OrderLinkResponse(url=takeaway_order_url(table_id), target_id=takeaway_target_id(table_id))


@router.get("/takeaway/image")
async def takeaway_qr(table_id: int | None = Query(default=None)) -> Response:
    return _png(takeaway_order_url(table_id))
