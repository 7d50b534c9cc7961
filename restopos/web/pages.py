"""
Staff-facing HTML pages, each behind the route guard.

Page bodies are placeholders for the front end; what matters here is who
gets to see them.
"""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from restopos.api.deps import require_page
from restopos.api.session import SessionCorrupt, session_store
from restopos.core.permissions import Page, pages_for
from restopos.schemas.auth import SessionUser

router = APIRouter(include_in_schema=False)

PAGE_PATHS: dict[Page, str] = {
    Page.HOME: "/",
    Page.SELECT_TABLE: "/select-table",
    Page.KDS: "/KDS",
    Page.ACCOUNTING: "/accounting",
    Page.MENU_MANAGEMENT: "/menu-management",
    Page.INGREDIENTS: "/ingredients",
    Page.USERS: "/users",
    Page.CUSTOMERS: "/customers",
}

PAGE_TITLES: dict[Page, str] = {
    Page.HOME: "Home",
    Page.SELECT_TABLE: "Select table",
    Page.KDS: "Kitchen display",
    Page.ACCOUNTING: "Accounting",
    Page.MENU_MANAGEMENT: "Menu management",
    Page.INGREDIENTS: "Ingredients",
    Page.USERS: "Users",
    Page.CUSTOMERS: "Customers",
}

_LOGIN_FORM = """<form id="login">
<input name="userid" placeholder="User ID" autocomplete="username">
<input name="password" type="password" placeholder="Password" autocomplete="current-password">
<button type="submit">Log in</button>
<p id="error" role="alert"></p>
</form>
<script>
document.getElementById("login").addEventListener("submit", async (e) => {
  e.preventDefault();
  const f = new FormData(e.target);
  const r = await fetch("/api/login", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify({userid: f.get("userid"), password: f.get("password")}),
  });
  const data = await r.json();
  if (data.success) { window.location.href = "/"; }
  else { document.getElementById("error").textContent = data.error; }
});
</script>"""


def _render(title: str, body: str) -> HTMLResponse:
    return HTMLResponse(
        "<!doctype html>\n"
        f'<html lang="th"><head><meta charset="utf-8"><title>{escape(title)}</title></head>\n'
        f"<body><main>{body}</main></body></html>\n"
    )


def _menu(user: SessionUser, current: Page) -> str:
    allowed = pages_for(user.role)
    items = "".join(
        f'<li><a href="{PAGE_PATHS[p]}">{escape(PAGE_TITLES[p])}</a></li>'
        for p in Page
        if p in allowed and p is not current
    )
    return f"<nav><ul>{items}</ul></nav>"


def _page(page: Page, user: SessionUser) -> HTMLResponse:
    who = escape(user.name or user.userid)
    body = (
        f"<h1>{escape(PAGE_TITLES[page])}</h1>"
        f'<p data-role="{escape(user.role)}">{who}</p>'
        f"{_menu(user, page)}"
        '<button onclick="fetch(\'/api/logout\', {method: \'POST\'}).then(() => location.href = \'/login\')">Log out</button>'
    )
    return _render(PAGE_TITLES[page], body)


@router.get("/login")
async def login_page(request: Request):
    """Login form; anyone already logged in goes straight home."""
    form = _render("Log in", f"<h1>RestoPOS</h1>{_LOGIN_FORM}")
    try:
        user = session_store.read(request)
    except SessionCorrupt:
        session_store.clear(form)
        return form
    if user is not None:
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    return form


def _register(page: Page) -> None:
    async def view(user: SessionUser = Depends(require_page(page))) -> HTMLResponse:
        return _page(page, user)

    view.__name__ = f"{page.name.lower()}_page"
    router.add_api_route(PAGE_PATHS[page], view, methods=["GET"], response_class=HTMLResponse)


for _p in Page:
    _register(_p)
