# tests/test_sticky_messages.py

from fastapi.testclient import TestClient

BASE = "/api/v1/sticky-messages"


def test_no_message_yet(client: TestClient):
    response = client.get(f"{BASE}/current")
    assert response.status_code == 200
    assert response.json() is None


def test_publish_and_read_current(client: TestClient, login_as, general_manager, db):
    db.tables["admin_users"] = [{"id": "admin-general", "full_name": "Head Office"}]
    login_as(general_manager)
    client.post(BASE, json={"message": "Office closed on Monday"})
    response = client.post(BASE, json={"message": "  Dues deadline is Friday  "})
    assert response.status_code == 201, response.text
    assert response.json()["message"] == "Dues deadline is Friday"

    current = client.get(f"{BASE}/current").json()
    assert current["message"] == "Dues deadline is Friday"
    assert current["creator_name"] == "Head Office"


def test_blank_message_rejected(client: TestClient, login_as, general_manager, db):
    login_as(general_manager)
    assert client.post(BASE, json={"message": "   "}).status_code == 400
    assert db.rows("sticky_messages") == []


def test_publishing_requires_head_office(client: TestClient, login_as, branch_manager):
    login_as(branch_manager)
    assert client.post(BASE, json={"message": "Hello"}).status_code == 403


def test_clear_message(client: TestClient, login_as, general_manager, db):
    login_as(general_manager)
    created = client.post(BASE, json={"message": "Temporary"}).json()
    assert client.delete(f"{BASE}/{created['id']}").status_code == 204
    assert client.get(f"{BASE}/current").json() is None
    assert client.delete(f"{BASE}/{created['id']}").status_code == 404
