# tests/test_scope.py

"""
Tests for row scope resolution and the ScopedTable wrapper.
"""

import pytest

from app.core.exceptions import AuthorizationError, ScopeError
from app.core.scope import Scope, ScopedTable, resolve_scope
from app.modules.auth.schemas import AdminUser


def test_head_office_scope_is_unrestricted(super_admin, general_manager):
    assert resolve_scope(super_admin).unrestricted
    assert resolve_scope(general_manager) == Scope()


def test_super_admin_scope_ignores_role_type():
    admin = AdminUser(id="s", role="super_admin", role_type="branch_manager", city=None)
    assert resolve_scope(admin).unrestricted


def test_regional_scope(regional_manager):
    assert resolve_scope(regional_manager) == Scope("region", 3)


def test_branch_scope(branch_manager):
    assert resolve_scope(branch_manager) == Scope("city", "Izmir")


def test_branch_manager_without_city_is_rejected(branch_manager_without_city):
    with pytest.raises(ScopeError):
        resolve_scope(branch_manager_without_city)


@pytest.mark.parametrize("region", [None, 0])
def test_regional_manager_without_region_is_rejected(region):
    with pytest.raises(ScopeError):
        resolve_scope(AdminUser(id="r", role="admin", role_type="regional_manager", region=region))


@pytest.mark.parametrize("role_type", [None, "janitor"])
def test_unknown_role_type_is_rejected(role_type):
    with pytest.raises(ScopeError):
        resolve_scope(AdminUser(id="x", role="admin", role_type=role_type))


def test_missing_user_is_rejected():
    with pytest.raises(ScopeError):
        resolve_scope(None)


def test_stamp_fills_and_guards_scope_column():
    scope = Scope("city", "Izmir")
    assert scope.stamp({"first_name": "A"}) == {"first_name": "A", "city": "Izmir"}
    assert scope.stamp({"city": "Izmir"}) == {"city": "Izmir"}
    with pytest.raises(AuthorizationError):
        scope.stamp({"city": "Ankara"})
    assert Scope().stamp({"city": "Ankara"}) == {"city": "Ankara"}


def test_scoped_select_only_returns_rows_in_scope(db):
    table = ScopedTable(db, "members", Scope("city", "Izmir"))
    rows = table.select().execute().data
    assert {r["id"] for r in rows} == {"member-izmir", "member-resigned"}


def test_scoped_get_hides_rows_outside_scope(db):
    table = ScopedTable(db, "members", Scope("city", "Izmir"))
    assert table.get("member-izmir")["city"] == "Izmir"
    assert table.get("member-ankara") is None


def test_scoped_update_cannot_touch_rows_outside_scope(db):
    table = ScopedTable(db, "members", Scope("region", 3))
    result = table.update("member-ankara", {"phone": "0"})
    assert result.data == []
    ankara = next(r for r in db.rows("members") if r["id"] == "member-ankara")
    assert ankara["phone"] == "05559876543"


def test_scoped_update_guard(db):
    table = ScopedTable(db, "members", Scope())
    assert table.update("member-resigned", {"is_active": True}, guard={"membership_status": "active"}).data == []
    assert table.update("member-izmir", {"is_active": False}, guard={"membership_status": "active"}).data


def test_scoped_update_cannot_move_row_out_of_scope(db):
    table = ScopedTable(db, "members", Scope("city", "Izmir"))
    with pytest.raises(AuthorizationError):
        table.update("member-izmir", {"city": "Ankara"})


def test_scoped_insert_is_stamped(db):
    table = ScopedTable(db, "members", Scope("city", "Izmir"))
    created = table.insert({"first_name": "New", "last_name": "Member"}).data[0]
    assert created["city"] == "Izmir"


def test_scope_error_maps_to_403(client, login_as, branch_manager_without_city):
    login_as(branch_manager_without_city)
    response = client.get("/api/v1/members")
    assert response.status_code == 403
