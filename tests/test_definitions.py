# tests/test_definitions.py

from fastapi.testclient import TestClient

BASE = "/api/v1/definitions"


def test_any_admin_can_list(client: TestClient, login_as, branch_manager):
    login_as(branch_manager)
    response = client.get(BASE, params={"type": "resignation_reason"})
    assert response.status_code == 200
    assert [d["id"] for d in response.json()] == ["reason-moved"]


def test_list_including_inactive(client: TestClient, login_as, branch_manager):
    login_as(branch_manager)
    response = client.get(BASE, params={"type": "resignation_reason", "include_inactive": True})
    assert [d["id"] for d in response.json()] == ["reason-moved", "reason-retired"]


def test_unknown_type_rejected(client: TestClient, login_as, branch_manager):
    login_as(branch_manager)
    assert client.get(BASE, params={"type": "colour"}).status_code == 422


def test_create_definition(client: TestClient, login_as, general_manager, db):
    login_as(general_manager)
    response = client.post(BASE, json={"definition_type": "position", "name": "  Nurse  ", "sort_order": 3})
    assert response.status_code == 201, response.text
    assert response.json()["name"] == "Nurse"
    assert db.rows("audit_logs")[-1]["entity_type"] == "DEFINITION"


def test_duplicate_definition(client: TestClient, login_as, general_manager):
    login_as(general_manager)
    response = client.post(BASE, json={"definition_type": "resignation_reason", "name": "Moved abroad"})
    assert response.status_code == 409


def test_managing_requires_head_office(client: TestClient, login_as, regional_manager):
    login_as(regional_manager)
    assert client.post(BASE, json={"definition_type": "title", "name": "Dr."}).status_code == 403
    assert client.delete(f"{BASE}/reason-moved").status_code == 403


def test_update_and_delete(client: TestClient, login_as, general_manager, db):
    login_as(general_manager)
    response = client.put(f"{BASE}/reason-retired", json={"is_active": True})
    assert response.status_code == 200
    assert response.json()["is_active"] is True

    assert client.delete(f"{BASE}/workplace-hospital").status_code == 204
    assert client.delete(f"{BASE}/workplace-hospital").status_code == 404
    assert all(d["id"] != "workplace-hospital" for d in db.rows("general_definitions"))
