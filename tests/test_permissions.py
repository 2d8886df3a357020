# tests/test_permissions.py

"""
Tests for PermissionManager capability and permission checks.
"""

import pytest

from app.config.permissions_config import PERMISSION_MATRIX, ROLE_TYPE_DEFAULT_PERMISSIONS
from app.core.permissions import PermissionManager
from app.modules.auth.schemas import AdminUser


@pytest.mark.parametrize("key", ["members.view", "users.manage", "finance.manage", "not.a.real.permission"])
def test_super_admin_has_every_permission(super_admin, key):
    assert PermissionManager.has_permission(super_admin, key) is True


def test_no_user_has_no_permission():
    assert PermissionManager.has_permission(None, "members.view") is False


def test_role_type_defaults_apply(branch_manager):
    assert PermissionManager.has_permission(branch_manager, "members.view")
    assert not PermissionManager.has_permission(branch_manager, "members.resign")


def test_role_permissions_extend_defaults(branch_manager):
    admin = branch_manager.model_copy(update={"permissions": ["members.resign"]})
    effective = PermissionManager.get_effective_permissions(admin)
    assert "members.resign" in effective
    assert set(ROLE_TYPE_DEFAULT_PERMISSIONS["branch_manager"]) <= set(effective)


def test_super_admin_effective_permissions_are_the_whole_catalogue(super_admin):
    keys = sorted(p["key"] for p in PERMISSION_MATRIX["permissions"])
    assert PermissionManager.get_effective_permissions(super_admin) == keys


def test_plain_dict_users_are_accepted():
    row = {"id": "x", "role": "admin", "role_type": "general_manager"}
    assert PermissionManager.can_manage_news(row)
    assert PermissionManager.has_permission(row, "members.view")


def test_head_office_capabilities(general_manager, regional_manager, branch_manager):
    for capability in (
        PermissionManager.can_manage_users,
        PermissionManager.can_manage_news,
        PermissionManager.can_manage_definitions,
        PermissionManager.can_manage_templates,
        PermissionManager.can_view_finance,
    ):
        assert capability(general_manager)
        assert not capability(regional_manager)
        assert not capability(branch_manager)


def test_regional_manager_can_manage_dues(regional_manager, branch_manager):
    assert PermissionManager.can_manage_dues(regional_manager)
    assert not PermissionManager.can_manage_dues(branch_manager)
    assert PermissionManager.can_view_dues(branch_manager)


@pytest.mark.parametrize("region", [None, 0])
def test_regional_manager_requires_region(region):
    admin = AdminUser(id="r", role="admin", role_type="regional_manager", region=region)
    assert not PermissionManager.is_regional_manager(admin)
    assert not PermissionManager.can_manage_dues(admin)


def test_branch_manager_requires_city(branch_manager_without_city):
    assert not PermissionManager.is_branch_manager(branch_manager_without_city)
    assert not PermissionManager.can_access_city_members(branch_manager_without_city, "Izmir")


def test_restricted_fields_only_for_super_admin(super_admin, general_manager):
    assert PermissionManager.can_edit_restricted_fields(super_admin)
    assert not PermissionManager.can_edit_restricted_fields(general_manager)


def test_users_permission_group_hidden_from_non_super_admin(super_admin, general_manager):
    assert PermissionManager.can_view_permission_group(super_admin, "users")
    assert not PermissionManager.can_view_permission_group(general_manager, "users")
    assert PermissionManager.can_view_permission_group(general_manager, "members")


def test_city_access(general_manager, regional_manager, branch_manager):
    assert PermissionManager.can_access_city_members(general_manager, "Ankara")
    assert PermissionManager.can_access_city_members(regional_manager, "Manisa", region=3)
    assert not PermissionManager.can_access_city_members(regional_manager, "Ankara", region=1)
    assert PermissionManager.can_access_city_members(branch_manager, "Izmir")
    assert not PermissionManager.can_access_city_members(branch_manager, "Ankara")
    assert PermissionManager.get_user_accessible_cities(branch_manager) == ["Izmir"]
    assert PermissionManager.get_user_accessible_cities(general_manager) == []


def test_menu_items_follow_capabilities(general_manager, branch_manager):
    head_office = {item["key"] for item in PermissionManager.get_menu_items(general_manager)}
    branch = {item["key"] for item in PermissionManager.get_menu_items(branch_manager)}
    assert {"users", "finance", "news", "sticky_message"} <= head_office
    assert "users" not in branch
    assert {"dashboard", "members", "dues"} <= branch
