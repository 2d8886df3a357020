# tests/test_audit_log.py

from fastapi.testclient import TestClient

BASE = "/api/v1/audit-log"


def test_record_uses_authenticated_admin(client: TestClient, login_as, branch_manager, db):
    login_as(branch_manager)
    response = client.post(
        BASE,
        json={"action": "export", "entity_type": "member", "details": {"format": "xlsx"}},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert response.status_code == 201, response.text
    assert response.json() == {"success": True}
    row = db.rows("audit_logs")[0]
    assert row["user_id"] == "admin-branch"
    assert row["action"] == "EXPORT"
    assert row["entity_type"] == "MEMBER"
    assert row["ip_address"] == "203.0.113.7"
    assert row["details"]["format"] == "xlsx"
    assert row["details"]["user_email"] == "bm@example.com"


def test_unknown_entity_recorded_as_unknown(client: TestClient, login_as, general_manager, db):
    login_as(general_manager)
    assert client.post(BASE, json={"action": "VIEW", "entity_type": "spaceship"}).status_code == 201
    assert db.rows("audit_logs")[0]["entity_type"] == "UNKNOWN"


def test_unknown_action_rejected(client: TestClient, login_as, general_manager, db):
    login_as(general_manager)
    assert client.post(BASE, json={"action": "HACK", "entity_type": "MEMBER"}).status_code == 422
    assert db.rows("audit_logs") == []


def test_write_failure_reported(client: TestClient, login_as, general_manager, db):
    db.fail("audit_logs", "insert")
    login_as(general_manager)
    assert client.post(BASE, json={"action": "VIEW", "entity_type": "MEMBER"}).status_code == 500


def test_listing_requires_admin_role(client: TestClient, login_as, branch_manager):
    login_as(branch_manager)
    assert client.get(BASE).status_code == 403


def test_listing_includes_actor(client: TestClient, login_as, general_manager, db):
    db.tables["admin_users"] = [{"id": "admin-general", "full_name": "Head Office", "email": "gm@example.com"}]
    db.tables["audit_logs"] = [
        {"id": "log-1", "user_id": "admin-general", "action": "CREATE", "entity_type": "NEWS",
         "created_at": "2024-01-01T10:00:00"},
        {"id": "log-2", "user_id": "admin-general", "action": "DELETE", "entity_type": "NEWS",
         "created_at": "2024-01-02T10:00:00"},
        {"id": "log-3", "user_id": "admin-gone", "action": "CREATE", "entity_type": "MEMBER",
         "created_at": "2024-01-03T10:00:00"},
    ]
    login_as(general_manager)
    body = client.get(BASE, params={"entity": "NEWS"}).json()
    assert [log["id"] for log in body] == ["log-2", "log-1"]
    assert body[0]["user_full_name"] == "Head Office"

    everything = client.get(BASE).json()
    assert everything[0]["id"] == "log-3"
    assert everything[0]["user_email"] is None
