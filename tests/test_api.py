"""
HTTP surface of a node, exercised through the FastAPI test client.
"""

from contextlib import ExitStack

import httpx
import pytest
from fastapi.testclient import TestClient

from privatediary.core.config import NodeRole
from privatediary.db.repositories.user_repository import UserRepository
from privatediary.main import create_app
from privatediary.models.user import User
from privatediary.node import DiaryNode
from privatediary.services.replication import NODE_TOKEN_HEADER

from tests.helpers import PASSWORD, BACKUP_PASSWORD, fast_hash, make_settings

USER_ID = "u-alice"
LOCATION = {"lat": 26.14, "lon": 91.73, "accuracy": 15}
DEVICE = {"device_id": "phone-1", "device_name": "Pixel", "ip": "10.0.0.5"}


@pytest.fixture
def make_client(tmp_path):
    """Start a node app with alice provisioned. One node per test."""
    with ExitStack() as stack:
        def factory(role=NodeRole.PRIMARY, peer_handler=None, **overrides):
            settings = make_settings(tmp_path, role, **overrides)
            peer_client = None
            if peer_handler is not None:
                peer_client = httpx.AsyncClient(transport=httpx.MockTransport(peer_handler))
            node = DiaryNode(settings, peer_client=peer_client)
            client = stack.enter_context(TestClient(create_app(settings, node, run_background_jobs=False)))
            client.portal.call(UserRepository.create, User(
                id=USER_ID,
                username="alice",
                password_hash=fast_hash(PASSWORD),
                backup_password_hash=fast_hash(BACKUP_PASSWORD)
            ))
            return client
        yield factory


def _login(client, password=PASSWORD, is_backup=False, location=LOCATION, device=DEVICE):
    body = {"username": "alice", "password": password, "is_backup": is_backup, "device_info": device}
    if location is not None:
        body["location"] = location
    return client.post("/api/login", json=body)


def _auth(client) -> dict:
    token = _login(client).json()["token"]
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Health
# =============================================================================


def test_health_reports_role(make_client):
    client = make_client(NodeRole.SECONDARY)

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["role"] == "secondary"
    assert body["store_connected"] is True


def test_node_status_lists_jobs(make_client):
    client = make_client(NodeRole.SECONDARY)

    body = client.get("/api/node-status").json()

    assert body["role"] == "secondary"
    assert body["peer"] is None
    assert set(body["jobs"]["tasks"]) == {"peer_health", "peer_sync", "daily_reminder", "session_cleanup"}


def test_primary_has_no_sync_job(make_client):
    client = make_client(NodeRole.PRIMARY)

    tasks = client.get("/api/node-status").json()["jobs"]["tasks"]

    assert "peer_sync" not in tasks


# =============================================================================
# Login
# =============================================================================


def test_login_success(make_client):
    client = make_client()

    response = _login(client)

    assert response.status_code == 200
    body = response.json()
    assert len(body["token"]) == 64
    assert body["user"] == {"username": "alice"}
    assert body["requires_notification_permission"] is True


def test_login_invalid_credentials(make_client):
    client = make_client()

    wrong = _login(client, password="wrong")
    unknown = client.post("/api/login", json={"username": "bob", "password": PASSWORD, "location": LOCATION})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"] == "Invalid credentials"


def test_login_without_location_locks_account(make_client):
    client = make_client()

    response = _login(client, location=None)

    assert response.status_code == 403
    body = response.json()
    assert body["message"] == "Location permission required. Account locked for 15 minutes."
    assert body["locked_until"]

    locked = _login(client, password=BACKUP_PASSWORD, is_backup=True)
    assert locked.status_code == 403
    assert locked.json()["message"].startswith("Account locked until")
    assert locked.json()["locked_until"] == body["locked_until"]


def test_login_validation_error(make_client):
    client = make_client()

    response = client.post("/api/login", json={"username": "alice"})

    assert response.status_code == 422
    assert response.json()["message"] == "Validation error"


def test_blocked_device_rejected_in_enforce_mode(make_client):
    client = make_client(BLOCK_LIST_MODE="enforce")
    headers = _auth(client)
    client.post("/api/block-device", json={"device_id": "stolen"}, headers=headers)

    response = _login(client, device={"device_id": "stolen"})

    assert response.status_code == 403
    assert response.json()["message"] == "Access blocked"


# =============================================================================
# Activity, logout and block lists
# =============================================================================


def test_activity_requires_bearer_token(make_client):
    client = make_client()

    response = client.get("/api/activity")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"

    invalid = client.get("/api/activity", headers={"Authorization": "Bearer nope"})
    assert invalid.status_code == 401


def test_activity_lists_sessions_and_active_devices(make_client):
    client = make_client()
    headers = _auth(client)
    _login(client, location=None, device={"device_id": "laptop"})

    body = client.get("/api/activity", headers=headers).json()

    assert [a["device_id"] for a in body["activities"]] == ["laptop", "phone-1"]
    assert body["activities"][0]["is_suspicious"] is True
    assert body["activities"][1]["location"]["lat"] == LOCATION["lat"]
    assert {a["device_id"] for a in body["active_devices"]} == {"laptop", "phone-1"}


def test_activity_filtered_by_device(make_client):
    client = make_client()
    headers = _auth(client)
    _login(client, device={"device_id": "laptop"})

    body = client.get("/api/activity", params={"device_id": "laptop"}, headers=headers).json()

    assert [a["device_id"] for a in body["activities"]] == ["laptop"]
    assert {a["device_id"] for a in body["active_devices"]} == {"laptop", "phone-1"}

    empty = client.get("/api/activity", params={"device_id": "nowhere"}, headers=headers).json()
    assert empty["activities"] == []


def test_logout_device_closes_sessions_and_revokes_token(make_client):
    client = make_client()
    headers = _auth(client)
    other = {"Authorization": f"Bearer {_login(client, device={'device_id': 'tablet'}).json()['token']}"}

    response = client.post("/api/logout-device", json={"device_id": "phone-1"}, headers=other)

    assert response.status_code == 200
    assert response.json()["data"] == {"closed_sessions": 1}
    assert client.get("/api/activity", headers=headers).status_code == 401

    active = client.get("/api/activity", headers=other).json()["active_devices"]
    assert [a["device_id"] for a in active] == ["tablet"]


def test_block_ip_is_idempotent(make_client):
    client = make_client()
    headers = _auth(client)

    for _ in range(2):
        assert client.post("/api/block-ip", json={"ip": "6.6.6.6"}, headers=headers).status_code == 200

    lists = client.get("/api/block-lists", headers=headers).json()
    assert lists == {"blocked_ips": ["6.6.6.6"], "blocked_devices": []}

    client.post("/api/unblock-ip", json={"ip": "6.6.6.6"}, headers=headers)
    assert client.get("/api/block-lists", headers=headers).json()["blocked_ips"] == []


def test_permissions_update(make_client):
    client = make_client()
    headers = _auth(client)

    response = client.put("/api/permissions", json={"notification_permission": True}, headers=headers)

    assert response.status_code == 200
    assert _login(client).json()["requires_notification_permission"] is False


# =============================================================================
# Diary
# =============================================================================


def test_create_and_list_diary_entries(make_client):
    client = make_client()
    headers = _auth(client)

    created = client.post("/api/diary", json={
        "entry": {"title": "First", "content": "Hello diary", "tags": ["intro"]},
        "location": LOCATION
    }, headers=headers)

    assert created.status_code == 200
    entry_id = created.json()["entry_id"]

    entries = client.get("/api/diary", headers=headers).json()["entries"]
    assert [e["id"] for e in entries] == [entry_id]
    assert entries[0]["user_id"] == USER_ID
    assert entries[0]["tags"] == ["intro"]


# =============================================================================
# Node-to-node
# =============================================================================


def _diary_batch():
    return {"entries": [{
        "id": "e-1",
        "user_id": USER_ID,
        "title": "Replicated",
        "content": "From the other node",
        "date": "2024-07-01T12:00:00+00:00",
        "tags": []
    }]}


def _session_batch(is_active=True):
    return {"activities": [{
        "user_id": USER_ID,
        "device_id": "phone-9",
        "login_time": "2024-07-01T12:00:00+00:00",
        "is_active": is_active
    }]}


def test_sync_endpoints_are_idempotent(make_client):
    client = make_client()
    headers = _auth(client)

    for _ in range(2):
        assert client.post("/api/sync-diary", json=_diary_batch()).json() == {"success": True, "synced": 1}
        assert client.post("/api/sync-activity", json=_session_batch()).json() == {"success": True, "synced": 1}
    client.post("/api/sync-activity", json=_session_batch(is_active=False))

    entries = client.get("/api/diary", headers=headers).json()["entries"]
    assert [e["id"] for e in entries] == ["e-1"]

    activities = client.get("/api/activity", headers=headers).json()["activities"]
    replicated = [a for a in activities if a["device_id"] == "phone-9"]
    assert len(replicated) == 1
    assert replicated[0]["is_active"] is False


def test_sync_requires_node_token_when_configured(make_client):
    client = make_client(NODE_SHARED_SECRET="s3cret")

    assert client.post("/api/sync-diary", json=_diary_batch()).status_code == 403
    wrong = client.post("/api/sync-diary", json=_diary_batch(), headers={NODE_TOKEN_HEADER: "guess"})
    assert wrong.status_code == 403
    ok = client.post("/api/sync-diary", json=_diary_batch(), headers={NODE_TOKEN_HEADER: "s3cret"})
    assert ok.status_code == 200


def test_recovery_routes_only_on_secondary(make_client):
    client = make_client(NodeRole.PRIMARY)

    assert client.get("/api/backup-data").status_code == 404
    assert client.post("/api/sync-now").status_code == 404


def test_backup_data_returns_recent_records(make_client):
    client = make_client(NodeRole.SECONDARY)
    client.post("/api/sync-diary", json=_diary_batch())
    client.post("/api/sync-activity", json=_session_batch())

    body = client.get("/api/backup-data", params={"limit": 10}).json()

    assert [e["id"] for e in body["diary_entries"]] == ["e-1"]
    assert [s["device_id"] for s in body["sessions"]] == ["phone-9"]


def test_sync_now_pushes_when_peer_healthy(make_client):
    pushed = []

    def peer(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/health":
            return httpx.Response(200, json={"status": "healthy", "role": "primary"})
        pushed.append(request.url.path)
        return httpx.Response(200, json={"success": True, "synced": 0})

    client = make_client(NodeRole.SECONDARY, peer_handler=peer)

    body = client.post("/api/sync-now").json()

    assert body["success"] is True
    assert pushed == ["/api/sync-diary", "/api/sync-activity"]
    assert body["data"]["peer"]["ok"] is True
    assert body["data"]["last_sync_at"] is not None


def test_sync_now_skipped_when_peer_down(make_client):
    def peer(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(NodeRole.SECONDARY, peer_handler=peer)

    body = client.post("/api/sync-now").json()

    assert body["success"] is False
    assert body["data"]["peer"]["ok"] is False
    assert body["data"]["peer"]["consecutive_failures"] == 1


# =============================================================================
# Chat webhook
# =============================================================================


def test_telegram_webhook_acknowledges_updates(make_client):
    client = make_client()

    response = client.post("/api/telegram-webhook", json={"message": {"text": "/status", "chat": {"id": 5}}})

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_telegram_webhook_ignores_malformed_updates(make_client):
    client = make_client()

    invalid = client.post(
        "/api/telegram-webhook",
        content=b"{not json",
        headers={"Content-Type": "application/json"}
    )
    not_object = client.post("/api/telegram-webhook", json=["/start"])
    bad_text = client.post("/api/telegram-webhook", json={"message": {"text": 5, "chat": {"id": 5}}})

    for response in (invalid, not_object, bad_text):
        assert response.status_code == 200
        assert response.json() == {"ok": True}
