"""Tests for the /api/users account admin endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from restopos.api.deps import get_session_factory
from restopos.core.config import settings
from restopos.core.security import verify_password
from restopos.main import app
from restopos.models.account import Account


async def _count(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(Account.id)))).scalar_one()


@pytest.mark.asyncio
async def test_list_users_newest_first(async_client: AsyncClient, add_account):
    now = datetime.now(timezone.utc)
    await add_account("old", "pw", created_at=now - timedelta(days=2))
    await add_account("new", "pw", created_at=now)
    await add_account("mid", "pw", created_at=now - timedelta(days=1))

    resp = await async_client.get("/api/users")
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert [u["userid"] for u in data["data"]] == ["new", "mid", "old"]
    assert all("password" not in u for u in data["data"])


@pytest.mark.asyncio
async def test_list_users_empty(async_client: AsyncClient):
    resp = await async_client.get("/api/users")
    assert resp.json() == {"success": True, "data": []}


@pytest.mark.asyncio
async def test_create_user_hashes_password(async_client: AsyncClient, fetch_account):
    resp = await async_client.post(
        "/api/users",
        json={"userid": "staff01", "password": "secret1", "role": "staff", "Name": "Nok"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    stored = await fetch_account("staff01")
    assert stored is not None
    assert stored.name == "Nok"
    assert stored.role == "staff"
    assert stored.password.startswith("$2b$")
    assert verify_password("secret1", stored.password)


@pytest.mark.asyncio
async def test_created_user_can_log_in(async_client: AsyncClient):
    await async_client.post(
        "/api/users", json={"userid": "chef02", "password": "pw-123", "role": "chef", "Name": "Chef"}
    )
    resp = await async_client.post("/api/login", json={"userid": "chef02", "password": "pw-123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "chef"


@pytest.mark.asyncio
async def test_create_duplicate_userid_rejected(async_client: AsyncClient, add_account, session_factory):
    await add_account("chef01", "hunter2", role="chef")
    before = await _count(session_factory)

    resp = await async_client.post(
        "/api/users", json={"userid": "chef01", "password": "other", "role": "staff", "Name": "Dup"}
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "This user ID already exists"}
    assert await _count(session_factory) == before


@pytest.mark.asyncio
async def test_create_race_caught_by_unique_constraint(async_client: AsyncClient, add_account, session_factory):
    """A duplicate that slips past the pre-check still ends as a conflict."""
    await add_account("chef01", "hunter2")

    async def _never_taken(*args, **kwargs):
        return False

    with patch("restopos.services.accounts._userid_taken", _never_taken):
        resp = await async_client.post(
            "/api/users", json={"userid": "chef01", "password": "x", "role": "staff", "Name": "Dup"}
        )
    assert resp.status_code == 400
    assert resp.json()["error"] == "This user ID already exists"
    assert await _count(session_factory) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["admin", "customer", "Owner", ""])
async def test_create_rejects_invalid_role(async_client: AsyncClient, session_factory, role):
    resp = await async_client.post(
        "/api/users", json={"userid": "x1", "password": "pw", "role": role, "Name": "X"}
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert await _count(session_factory) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"password": "pw", "role": "staff"},
        {"userid": "x1", "role": "staff"},
        {"userid": "x1", "password": "  ", "role": "staff"},
        {"userid": "", "password": "pw", "role": "staff"},
    ],
)
async def test_create_requires_fields(async_client: AsyncClient, body):
    resp = await async_client.post("/api/users", json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_update_blank_password_keeps_hash(async_client: AsyncClient, add_account, fetch_account):
    account = await add_account("chef01", "hunter2", role="chef", name="Old")
    original_hash = account.password

    for blank in (None, "", "   "):
        body = {"id": account.id, "userid": "chef01", "role": "chef", "Name": "New"}
        if blank is not None:
            body["password"] = blank
        resp = await async_client.put("/api/users", json=body)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    stored = await fetch_account("chef01")
    assert stored.password == original_hash
    assert stored.name == "New"


@pytest.mark.asyncio
async def test_update_password_rehashes(async_client: AsyncClient, add_account, fetch_account):
    account = await add_account("chef01", "hunter2", role="chef")
    resp = await async_client.put(
        "/api/users",
        json={"id": account.id, "userid": "chef01", "password": "hunter2", "role": "chef", "Name": "C"},
    )
    assert resp.status_code == 200

    stored = await fetch_account("chef01")
    assert stored.password != account.password
    assert stored.password.startswith("$2b$")
    assert verify_password("hunter2", stored.password)


@pytest.mark.asyncio
async def test_update_rehashes_legacy_password(async_client: AsyncClient, add_account, fetch_account):
    account = await add_account("legacy1", "plain123", hashed=False)
    await async_client.put(
        "/api/users",
        json={"id": account.id, "userid": "legacy1", "password": "plain123", "role": "staff", "Name": "L"},
    )
    stored = await fetch_account("legacy1")
    assert stored.password.startswith("$2b$")


@pytest.mark.asyncio
async def test_update_changes_userid_and_role(async_client: AsyncClient, add_account, fetch_account):
    account = await add_account("staff01", "pw", role="staff")
    resp = await async_client.put(
        "/api/users", json={"id": account.id, "userid": "chef09", "role": "chef", "Name": "Promoted"}
    )
    assert resp.status_code == 200
    assert await fetch_account("staff01") is None
    moved = await fetch_account("chef09")
    assert moved.role == "chef"
    assert moved.id == account.id


@pytest.mark.asyncio
async def test_update_to_taken_userid_rejected(async_client: AsyncClient, add_account, fetch_account):
    await add_account("chef01", "pw", role="chef")
    other = await add_account("staff01", "pw", role="staff")
    resp = await async_client.put(
        "/api/users", json={"id": other.id, "userid": "chef01", "role": "staff", "Name": "S"}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "This user ID already exists"
    assert (await fetch_account("staff01")) is not None


@pytest.mark.asyncio
async def test_update_keeping_own_userid_is_not_a_conflict(async_client: AsyncClient, add_account):
    account = await add_account("chef01", "pw", role="chef")
    resp = await async_client.put(
        "/api/users", json={"id": account.id, "userid": "chef01", "role": "owner", "Name": "C"}
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_update_missing_account_is_noop(async_client: AsyncClient, session_factory):
    resp = await async_client.put(
        "/api/users", json={"id": 999, "userid": "ghost", "role": "staff", "Name": "G"}
    )
    assert resp.status_code == 200
    assert await _count(session_factory) == 0


@pytest.mark.asyncio
async def test_delete_user(async_client: AsyncClient, add_account, fetch_account):
    account = await add_account("staff01", "pw")
    resp = await async_client.request("DELETE", "/api/users", json={"id": account.id})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert await fetch_account("staff01") is None


@pytest.mark.asyncio
async def test_delete_missing_user_succeeds(async_client: AsyncClient):
    resp = await async_client.request("DELETE", "/api/users", json={"id": 12345})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_admin_api_without_store(async_client: AsyncClient):
    app.dependency_overrides[get_session_factory] = lambda: None
    resp = await async_client.get("/api/users")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal database error"}


# ── Optional owner gate ─────────────────────────────────────────────
@pytest.mark.asyncio
async def test_admin_api_open_by_default(async_client: AsyncClient):
    assert settings.ADMIN_API_REQUIRES_OWNER is False
    resp = await async_client.get("/api/users")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_admin_api_gate_requires_session(async_client: AsyncClient):
    with patch.object(settings, "ADMIN_API_REQUIRES_OWNER", True):
        resp = await async_client.get("/api/users")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_admin_api_gate_rejects_staff(async_client: AsyncClient, session_headers):
    with patch.object(settings, "ADMIN_API_REQUIRES_OWNER", True):
        resp = await async_client.request(
            "DELETE", "/api/users", json={"id": 1}, headers=session_headers(2, "chef01", "chef")
        )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_admin_api_gate_allows_owner(async_client: AsyncClient, session_headers):
    with patch.object(settings, "ADMIN_API_REQUIRES_OWNER", True):
        resp = await async_client.get("/api/users", headers=session_headers(1, "boss", "owner"))
    assert resp.status_code == 200
