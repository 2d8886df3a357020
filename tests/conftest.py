# tests/conftest.py

"""
Pytest configuration and shared fixtures.

Supabase is replaced by the in-memory FakeSupabase and the authenticated
admin by a dependency override, so no test talks to a real backend.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from app.config import settings
from app.core.dependencies import get_current_admin
from app.database.supabase_client import get_supabase
from app.main import app as fastapi_app, limiter
from app.modules.auth.schemas import AdminUser
from app.modules.auth.service import clear_auth_cache
from tests.fake_supabase import FakeSupabase


MEMBERS = [
    {
        "id": "member-izmir", "first_name": "Ayse", "last_name": "Yilmaz",
        "tc_identity": "11111111110", "membership_number": "M-001",
        "phone": "05551234567", "email": "ayse@example.com",
        "city": "Izmir", "region": 3, "membership_status": "active", "is_active": True,
        "created_at": "2023-01-01T00:00:00",
    },
    {
        "id": "member-ankara", "first_name": "Mehmet", "last_name": "Demir",
        "tc_identity": "22222222220", "membership_number": "M-002",
        "phone": "05559876543", "email": "mehmet@example.com",
        "city": "Ankara", "region": 1, "membership_status": "active", "is_active": True,
        "created_at": "2023-01-02T00:00:00",
    },
    {
        "id": "member-resigned", "first_name": "Zeynep", "last_name": "Kaya",
        "city": "Izmir", "region": 3, "membership_status": "resigned", "is_active": False,
        "created_at": "2023-01-03T00:00:00",
    },
    {
        "id": "member-pending", "first_name": "Ali", "last_name": "Celik",
        "phone": "123", "email": "not-an-email",
        "city": "Manisa", "region": 3, "membership_status": "pending", "is_active": False,
        "created_at": "2023-01-04T00:00:00",
    },
]

DEFINITIONS = [
    {"id": "reason-moved", "definition_type": "resignation_reason", "name": "Moved abroad",
     "sort_order": 1, "is_active": True},
    {"id": "reason-retired", "definition_type": "resignation_reason", "name": "Retired",
     "sort_order": 2, "is_active": False},
    {"id": "workplace-hospital", "definition_type": "workplace", "name": "State Hospital",
     "sort_order": 1, "is_active": True},
]

PERMISSIONS = [
    {"id": "perm-members-view", "key": "members.view", "name": "View members", "group_name": "members"},
    {"id": "perm-members-resign", "key": "members.resign", "name": "Resign members", "group_name": "members"},
    {"id": "perm-news", "key": "news.manage", "name": "Manage news", "group_name": "content"},
    {"id": "perm-users-manage", "key": "users.manage", "name": "Manage users", "group_name": "users"},
]


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase({
        "members": MEMBERS,
        "general_definitions": DEFINITIONS,
        "permissions": PERMISSIONS,
    })


@pytest.fixture
def super_admin() -> AdminUser:
    return AdminUser(id="admin-super", email="root@example.com", full_name="Root Admin",
                     role="super_admin", role_type="general_manager")


@pytest.fixture
def general_manager() -> AdminUser:
    return AdminUser(id="admin-general", email="gm@example.com", full_name="Head Office",
                     role="admin", role_type="general_manager")


@pytest.fixture
def regional_manager() -> AdminUser:
    return AdminUser(id="admin-regional", email="rm@example.com", full_name="Region Three",
                     role="admin", role_type="regional_manager", region=3)


@pytest.fixture
def branch_manager() -> AdminUser:
    return AdminUser(id="admin-branch", email="bm@example.com", full_name="Izmir Branch",
                     role="branch_manager", role_type="branch_manager", city="Izmir")


@pytest.fixture
def branch_manager_without_city() -> AdminUser:
    return AdminUser(id="admin-branch-nocity", email="nocity@example.com", full_name="No City",
                     role="branch_manager", role_type="branch_manager", city=None)


@pytest.fixture(autouse=True)
def local_storage(monkeypatch):
    """Keep uploads in the fake Supabase Storage even if AWS settings are present."""
    monkeypatch.setattr(settings, "s3_bucket_name", None)
    yield


@pytest.fixture(autouse=True)
def reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def app(db):
    fastapi_app.dependency_overrides[get_supabase] = lambda: db
    yield fastapi_app
    fastapi_app.dependency_overrides = {}


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(app):
    """Make the given admin the authenticated identity for following requests."""
    def _login(admin: AdminUser) -> AdminUser:
        app.dependency_overrides[get_current_admin] = lambda: admin
        return admin
    return _login
