# tests/test_admin_users.py

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

BASE = "/api/v1/admin-users"


@pytest.fixture
def service_client(monkeypatch):
    """Service-role client whose auth admin API creates users successfully."""
    service = MagicMock()
    service.auth.admin.create_user.return_value = SimpleNamespace(user=SimpleNamespace(id="admin-new"))
    monkeypatch.setattr("app.modules.admin_users.service.get_service_supabase", lambda: service)
    return service


def _payload(**overrides):
    payload = {
        "email": "new@example.com",
        "password": "correct-horse",
        "full_name": "New Admin",
        "role": "branch_manager",
        "role_type": "branch_manager",
        "city": "Izmir",
        "region": 3,
    }
    payload.update(overrides)
    return payload


def test_create_branch_manager(client: TestClient, login_as, general_manager, db, service_client):
    login_as(general_manager)
    response = client.post(BASE, json=_payload())
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["id"] == "admin-new"
    assert body["city"] == "Izmir"
    # Branch managers are scoped by city only
    assert body["region"] is None
    assert any(log["action"] == "CREATE" and log["entity_type"] == "USER" for log in db.rows("audit_logs"))


def test_branch_manager_requires_city(client: TestClient, login_as, general_manager, db, service_client):
    login_as(general_manager)
    response = client.post(BASE, json=_payload(city=None))
    assert response.status_code == 422
    service_client.auth.admin.create_user.assert_not_called()


def test_regional_manager_requires_region(client: TestClient, login_as, general_manager, service_client):
    login_as(general_manager)
    response = client.post(BASE, json=_payload(role="admin", role_type="regional_manager", region=None))
    assert response.status_code == 422


def test_role_type_taken_from_role(client: TestClient, login_as, general_manager, db, service_client):
    db.tables["roles"] = [{"id": "role-regional", "name": "Regional", "role_type": "regional_manager"}]
    login_as(general_manager)
    response = client.post(BASE, json=_payload(role="admin", role_type="branch_manager", role_id="role-regional"))
    assert response.status_code == 201, response.text
    assert response.json()["role_type"] == "regional_manager"
    assert response.json()["region"] == 3
    assert response.json()["city"] is None


def test_only_super_admin_creates_super_admin(client: TestClient, login_as, general_manager, service_client):
    login_as(general_manager)
    response = client.post(BASE, json=_payload(role="super_admin", role_type="general_manager"))
    assert response.status_code == 403


def test_profile_failure_removes_auth_user(client: TestClient, login_as, super_admin, db, service_client):
    db.fail("admin_users", "insert")
    login_as(super_admin)
    response = client.post(BASE, json=_payload())
    assert response.status_code == 500
    service_client.auth.admin.delete_user.assert_called_once_with("admin-new")


def test_branch_manager_cannot_manage_admins(client: TestClient, login_as, branch_manager, service_client):
    login_as(branch_manager)
    assert client.get(BASE).status_code == 403


def test_cannot_deactivate_self(client: TestClient, login_as, general_manager, db):
    db.tables["admin_users"] = [{"id": "admin-general", "email": "gm@example.com", "role": "admin"}]
    login_as(general_manager)
    response = client.post(f"{BASE}/admin-general/active", json={"is_active": False})
    assert response.status_code == 400


def test_super_admin_protected_from_admins(client: TestClient, login_as, general_manager, db):
    db.tables["admin_users"] = [{"id": "admin-super", "email": "root@example.com", "role": "super_admin"}]
    login_as(general_manager)
    response = client.post(f"{BASE}/admin-super/active", json={"is_active": False})
    assert response.status_code == 403
    assert db.rows("admin_users")[0].get("is_active") is None


def test_update_moves_scope_with_role_type(client: TestClient, login_as, general_manager, db):
    db.tables["admin_users"] = [{
        "id": "admin-branch", "email": "bm@example.com", "role": "branch_manager",
        "role_type": "branch_manager", "city": "Izmir",
    }]
    login_as(general_manager)
    response = client.put(f"{BASE}/admin-branch", json={"role_type": "regional_manager", "region": 3})
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["role_type"] == "regional_manager"
    assert body["region"] == 3
    assert body["city"] is None
