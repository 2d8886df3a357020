"""
Capability checks for admin users.

Every check is pure and accepts an AdminUser model, a plain dict (e.g. a raw
``admin_users`` row) or None. Missing fields never raise: an admin without a
role_type is treated as the least privileged admin.
"""

from typing import Any, Dict, List, Optional

from app.config.permissions_config import (
    PERMISSION_MATRIX,
    ROLE_TYPE_DEFAULT_PERMISSIONS,
    SUPER_ADMIN_ONLY_GROUPS,
)


def _field(user: Any, name: str) -> Any:
    if user is None:
        return None
    if isinstance(user, dict):
        return user.get(name)
    return getattr(user, name, None)


class PermissionManager:

    @staticmethod
    def is_super_admin(user: Any) -> bool:
        return _field(user, "role") == "super_admin"

    @staticmethod
    def is_general_manager(user: Any) -> bool:
        return _field(user, "role_type") == "general_manager"

    @staticmethod
    def is_regional_manager(user: Any) -> bool:
        return _field(user, "role_type") == "regional_manager" and bool(_field(user, "region"))

    @staticmethod
    def is_branch_manager(user: Any) -> bool:
        return _field(user, "role_type") == "branch_manager" and bool(_field(user, "city"))

    @classmethod
    def _is_head_office(cls, user: Any) -> bool:
        return cls.is_super_admin(user) or cls.is_general_manager(user)

    # Row visibility

    @classmethod
    def can_access_all_members(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_access_region_members(cls, user: Any, region: Optional[int] = None) -> bool:
        if not cls.is_regional_manager(user):
            return False
        return region is None or _field(user, "region") == region

    @classmethod
    def can_access_city_members(cls, user: Any, city: Optional[str] = None, region: Optional[int] = None) -> bool:
        if cls.can_access_all_members(user):
            return True
        if cls.can_access_region_members(user, region):
            return True
        if cls.is_branch_manager(user):
            return city is None or _field(user, "city") == city
        return False

    @classmethod
    def get_user_accessible_cities(cls, user: Any) -> List[str]:
        """Cities the admin is limited to; an empty list means no city restriction."""
        if cls.can_access_all_members(user):
            return []
        if cls.is_branch_manager(user):
            return [_field(user, "city")]
        return []

    # Capabilities

    @classmethod
    def can_manage_users(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_news(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_announcements(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_sliders(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_discounts(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_branches(cls, user: Any) -> bool:
        return cls._is_head_office(user) or cls.is_regional_manager(user)

    @classmethod
    def can_manage_categories(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_definitions(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_sticky_messages(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_templates(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_manage_dues(cls, user: Any) -> bool:
        return cls._is_head_office(user) or cls.is_regional_manager(user)

    @classmethod
    def can_view_dues(cls, user: Any) -> bool:
        return user is not None

    @classmethod
    def can_manage_finance(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_view_finance(cls, user: Any) -> bool:
        return cls._is_head_office(user)

    @classmethod
    def can_edit_restricted_fields(cls, user: Any) -> bool:
        return cls.is_super_admin(user)

    @classmethod
    def can_view_permission_group(cls, user: Any, group_name: Optional[str]) -> bool:
        if group_name in SUPER_ADMIN_ONLY_GROUPS:
            return cls.is_super_admin(user)
        return user is not None

    @classmethod
    def get_effective_permissions(cls, user: Any) -> List[str]:
        """Role permissions plus the defaults of the admin's role_type."""
        if cls.is_super_admin(user):
            return sorted(p["key"] for p in PERMISSION_MATRIX["permissions"])
        keys = set(_field(user, "permissions") or [])
        keys.update(ROLE_TYPE_DEFAULT_PERMISSIONS.get(_field(user, "role_type"), []))
        return sorted(keys)

    @classmethod
    def has_permission(cls, user: Any, permission_key: str) -> bool:
        if cls.is_super_admin(user):
            return True
        if user is None:
            return False
        return permission_key in cls.get_effective_permissions(user)

    @classmethod
    def get_menu_items(cls, user: Any) -> List[Dict[str, str]]:
        items = [
            {"key": "dashboard", "href": "/admin/dashboard"},
            {"key": "members", "href": "/admin/members"},
        ]
        checks = [
            (cls.can_view_dues, "dues", "/admin/dues"),
            (cls.can_view_finance, "finance", "/admin/finance"),
            (cls.can_manage_news, "news", "/admin/news"),
            (cls.can_manage_announcements, "announcements", "/admin/announcements"),
            (cls.can_manage_sliders, "sliders", "/admin/sliders"),
            (cls.can_manage_discounts, "discounts", "/admin/discounts"),
            (cls.can_manage_branches, "branches", "/admin/branches"),
            (cls.can_manage_categories, "categories", "/admin/categories"),
            (cls.can_manage_definitions, "definitions", "/admin/definitions"),
            (cls.can_manage_sticky_messages, "sticky_message", "/admin/tools/sticky-message"),
            (cls.can_manage_users, "users", "/admin/users"),
        ]
        for check, key, href in checks:
            if check(user):
                items.append({"key": key, "href": href})
        return items
