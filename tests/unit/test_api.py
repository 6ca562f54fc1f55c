"""HTTP tests over the ASGI app with dependency overrides."""

import json

import httpx
import pytest

from jurist.auth.dependencies import get_documents
from jurist.database import get_db
from jurist.main import app
from jurist.redis_client import get_redis
from tests.conftest import IIN_C, create_lawyer


@pytest.fixture
def sessions(mock_redis):
    """token -> session JSON served by the mocked Redis."""
    store: dict[str, str] = {}

    async def fake_get(key):
        return store.get(key)

    mock_redis.get.side_effect = fake_get
    return store


def login(sessions, token, kind, subject_id):
    sessions[f"session:{token}"] = json.dumps({"kind": kind, "subject_id": str(subject_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory, mock_redis, document_store):
    async def override_db():
        async with session_factory() as session:
            yield session

    async def override_redis():
        return mock_redis

    async def override_documents():
        return document_store

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_redis] = override_redis
    app.dependency_overrides[get_documents] = override_documents

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class TestPublicEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_submit_request(self, client, request_form):
        response = await client.post("/api/v1/requests", json=request_form)

        assert response.status_code == 201
        assert response.json()["request_number"].startswith("REQ-")

    @pytest.mark.asyncio
    async def test_submit_invalid(self, client, request_form):
        request_form["description"] = "too short"
        response = await client.post("/api/v1/requests", json=request_form)

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["field"] == "description"

    @pytest.mark.asyncio
    async def test_register_lawyer(self, client, mock_redis):
        response = await client.post(
            "/api/v1/lawyers/register",
            headers={"X-Identity-Id": "idp-123"},
            data={
                "email": "Reg@Example.kz",
                "lawyer_type": "CONSULTANT",
                "full_name": "Данияр Ахметов",
                "national_id": IIN_C,
                "phone": "+77019998877",
            },
            files={
                "photo": ("photo.png", b"\x89PNG", "image/png"),
                "diploma": ("diploma.pdf", b"%PDF", "application/pdf"),
                "license": ("license.pdf", b"%PDF", "application/pdf"),
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["email"] == "reg@example.kz"
        mock_redis.lpush.assert_awaited()


class TestLawyerEndpoints:
    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/v1/lawyer/requests")
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_admin_cannot_use_lawyer_routes(self, client, sessions, admin_user):
        headers = login(sessions, "adm", "admin", admin_user.id)
        response = await client.get("/api/v1/lawyer/requests", headers=headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_pending_lawyer_forbidden(self, client, sessions, pending_lawyer, new_request):
        headers = login(sessions, "pend", "lawyer", pending_lawyer.id)
        response = await client.get("/api/v1/lawyer/requests", headers=headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_claim_flow(self, client, sessions, db, approved_lawyer, new_request):
        rival = await create_lawyer(db, national_id=IIN_C)
        mine = login(sessions, "me", "lawyer", approved_lawyer.id)
        theirs = login(sessions, "rival", "lawyer", rival.id)

        listing = await client.get("/api/v1/lawyer/requests", headers=mine)
        assert listing.status_code == 200
        assert listing.json()["meta"]["total"] == 1
        assert "phone" not in listing.json()["data"][0]

        claimed = await client.post(
            f"/api/v1/lawyer/requests/{new_request.id}/claim", headers=mine
        )
        assert claimed.status_code == 200
        assert claimed.json()["status"] == "IN_PROGRESS"

        lost = await client.post(
            f"/api/v1/lawyer/requests/{new_request.id}/claim", headers=theirs
        )
        assert lost.status_code == 409
        assert lost.json()["details"]["reason"] == "already_taken"

        stolen = await client.post(
            f"/api/v1/lawyer/requests/{new_request.id}/release", headers=theirs
        )
        assert stolen.status_code == 403

        my = await client.get("/api/v1/lawyer/requests/my", headers=mine)
        assert my.json()["data"][0]["phone"] == "+77017654321"

    @pytest.mark.asyncio
    async def test_profile(self, client, sessions, approved_lawyer):
        headers = login(sessions, "me", "lawyer", approved_lawyer.id)

        response = await client.patch(
            "/api/v1/lawyer/profile", headers=headers, json={"full_name": "Айгерим Нурланова"}
        )

        assert response.status_code == 200
        assert response.json()["full_name"] == "Айгерим Нурланова"


class TestAdminEndpoints:
    @pytest.mark.asyncio
    async def test_lawyer_cannot_use_admin_routes(self, client, sessions, approved_lawyer):
        headers = login(sessions, "me", "lawyer", approved_lawyer.id)
        response = await client.get("/api/v1/admin/stats", headers=headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_stats(self, client, sessions, admin_user, approved_lawyer, new_request):
        headers = login(sessions, "adm", "admin", admin_user.id)

        response = await client.get("/api/v1/admin/stats", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["requests"]["total"] == 1
        assert body["lawyers"]["approved"] == 1

    @pytest.mark.asyncio
    async def test_moderation(self, client, sessions, admin_user, pending_lawyer):
        headers = login(sessions, "adm", "admin", admin_user.id)

        short = await client.patch(
            f"/api/v1/admin/lawyers/{pending_lawyer.id}/reject",
            headers=headers,
            json={"reason": "too short"},
        )
        assert short.status_code == 422
        assert short.json()["details"]["field"] == "reason"

        approved = await client.patch(
            f"/api/v1/admin/lawyers/{pending_lawyer.id}/approve", headers=headers
        )
        assert approved.status_code == 200
        assert approved.json()["lawyer"]["status"] == "APPROVED"

    @pytest.mark.asyncio
    async def test_request_override_and_delete(self, client, sessions, admin_user, new_request):
        headers = login(sessions, "adm", "admin", admin_user.id)

        updated = await client.patch(
            f"/api/v1/admin/requests/{new_request.id}", headers=headers, json={"status": "SPAM"}
        )
        assert updated.status_code == 200
        assert updated.json()["status"] == "SPAM"

        deleted = await client.delete(f"/api/v1/admin/requests/{new_request.id}", headers=headers)
        assert deleted.status_code == 200

        missing = await client.get(f"/api/v1/admin/requests/{new_request.id}", headers=headers)
        assert missing.status_code == 404
        assert missing.json()["code"] == "NOT_FOUND"
