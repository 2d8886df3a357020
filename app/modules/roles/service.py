import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.core.permissions import PermissionManager
from app.modules.auth.schemas import AdminUser
from app.modules.roles.schemas import (
    PermissionResponse, PermissionGroupResponse,
    RoleCreate, RoleUpdate, RoleResponse, RoleWithPermissionsResponse,
    RolePermissionsUpdateResponse
)

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_permissions(self, admin: AdminUser, permission_ids: Optional[List[str]] = None) -> List[PermissionResponse]:
        """List permissions visible to the admin (users group only for super_admin)"""
        try:
            if permission_ids is not None and len(permission_ids) == 0:
                return []
            query = self.supabase.table("permissions").select("*")
            if permission_ids is not None:
                query = query.in_("id", permission_ids)
            result = query.order("group_name").order("name").execute()
            return [
                PermissionResponse(**p) for p in result.data or []
                if PermissionManager.can_view_permission_group(admin, p.get("group_name"))
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_grouped(self, admin: AdminUser) -> List[PermissionGroupResponse]:
        """Visible permissions bucketed by group_name"""
        groups: Dict[str, List[PermissionResponse]] = {}
        for permission in self.list_permissions(admin):
            groups.setdefault(permission.group_name, []).append(permission)
        return [PermissionGroupResponse(group_name=name, permissions=perms) for name, perms in groups.items()]

    def get_permissions_by_ids(self, permission_ids: List[str]) -> List[dict]:
        if not permission_ids:
            return []
        result = self.supabase.table("permissions")\
            .select("*")\
            .in_("id", permission_ids)\
            .execute()
        return result.data or []


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _check_assignable(self, admin: AdminUser, permission_ids: List[str]) -> None:
        """Every permission must exist and be in a group the admin may assign"""
        if not permission_ids:
            return
        found = PermissionService(self.supabase).get_permissions_by_ids(permission_ids)
        found_ids = {p["id"] for p in found}
        missing = [pid for pid in set(permission_ids) if pid not in found_ids]
        if missing:
            raise HTTPException(status_code=404, detail=f"Permission not found: {', '.join(sorted(missing))}")
        for permission in found:
            if not PermissionManager.can_view_permission_group(admin, permission.get("group_name")):
                raise HTTPException(
                    status_code=403,
                    detail=f"Only super admins can assign '{permission.get('group_name')}' permissions"
                )

    def create_role(self, role_data: RoleCreate, admin: AdminUser) -> RoleWithPermissionsResponse:
        """Create a new role with its permissions"""
        try:
            self._check_assignable(admin, role_data.permission_ids)

            existing = self.supabase.table("roles")\
                .select("id")\
                .eq("name", role_data.name.strip())\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="A role with this name already exists")

            result = self.supabase.table("roles").insert({
                "name": role_data.name.strip(),
                "description": (role_data.description or "").strip() or None,
                "role_type": role_data.role_type,
                "is_system_role": False
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create role")

            role = result.data[0]
            if role_data.permission_ids:
                try:
                    self.supabase.table("role_permissions").insert([
                        {"role_id": role["id"], "permission_id": pid}
                        for pid in dict.fromkeys(role_data.permission_ids)
                    ]).execute()
                except Exception:
                    # Do not leave a role without its requested permissions
                    self.supabase.table("roles").delete().eq("id", role["id"]).execute()
                    raise

            logger.info(f"Role {role['name']} created by {admin.id}")
            return self.get_role_with_permissions(role["id"], admin)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_role_by_id(self, role_id: str) -> RoleResponse:
        """Get role by ID"""
        try:
            result = self.supabase.table("roles")\
                .select("*")\
                .eq("id", role_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Role not found")

            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_role_permission_ids(self, role_id: str) -> List[str]:
        result = self.supabase.table("role_permissions")\
            .select("permission_id")\
            .eq("role_id", role_id)\
            .execute()
        return [rp["permission_id"] for rp in result.data or []]

    def get_role_with_permissions(self, role_id: str, admin: AdminUser) -> RoleWithPermissionsResponse:
        """Get role with the permissions the admin is allowed to see"""
        try:
            role = self.get_role_by_id(role_id)
            permission_ids = self.get_role_permission_ids(role_id)
            permissions = [
                PermissionResponse(**p)
                for p in PermissionService(self.supabase).get_permissions_by_ids(permission_ids)
                if PermissionManager.can_view_permission_group(admin, p.get("group_name"))
            ]
            return RoleWithPermissionsResponse(**role.model_dump(), permissions=permissions)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_role(self, role_id: str, role_data: RoleUpdate) -> RoleResponse:
        """Update role"""
        try:
            update_data = {"updated_at": datetime.utcnow().isoformat()}
            if role_data.name:
                update_data["name"] = role_data.name.strip()
            if role_data.description is not None:
                update_data["description"] = role_data.description
            if role_data.role_type:
                update_data["role_type"] = role_data.role_type

            result = self.supabase.table("roles")\
                .update(update_data)\
                .eq("id", role_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Role not found")

            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_roles(self, limit: int = 100, offset: int = 0) -> List[RoleResponse]:
        """List roles"""
        try:
            result = self.supabase.table("roles")\
                .select("*")\
                .order("name")\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [RoleResponse(**role) for role in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_role(self, role_id: str) -> bool:
        """Delete a non-system role that no admin uses"""
        try:
            role = self.get_role_by_id(role_id)
            if role.is_system_role:
                raise HTTPException(status_code=400, detail="System roles cannot be deleted")

            in_use = self.supabase.table("admin_users")\
                .select("id")\
                .eq("role_id", role_id)\
                .limit(1)\
                .execute()
            if in_use.data:
                raise HTTPException(status_code=409, detail="Role is assigned to admin users")

            # Remove role_permissions first
            self.supabase.table("role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .execute()

            result = self.supabase.table("roles")\
                .delete()\
                .eq("id", role_id)\
                .execute()

            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def replace_role_permissions(self, role_id: str, permission_ids: List[str], admin: AdminUser) -> RolePermissionsUpdateResponse:
        """Replace all permissions of a role"""
        try:
            self.get_role_by_id(role_id)
            self._check_assignable(admin, permission_ids)
            previous_ids = self.get_role_permission_ids(role_id)

            # A non super_admin cannot see 'users' permissions, so it must not strip them either
            preserved: List[str] = []
            if not PermissionManager.is_super_admin(admin):
                current = PermissionService(self.supabase).get_permissions_by_ids(previous_ids)
                preserved = [
                    p["id"] for p in current
                    if not PermissionManager.can_view_permission_group(admin, p.get("group_name"))
                ]

            self.supabase.table("role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .execute()

            final_ids = list(dict.fromkeys(list(permission_ids) + preserved))
            if final_ids:
                try:
                    self.supabase.table("role_permissions").insert([
                        {"role_id": role_id, "permission_id": pid} for pid in final_ids
                    ]).execute()
                except Exception:
                    self._restore_role_permissions(role_id, previous_ids)
                    raise

            visible_ids = list(dict.fromkeys(permission_ids))
            return RolePermissionsUpdateResponse(
                role_id=role_id,
                assigned_count=len(visible_ids),
                permission_ids=visible_ids,
                message=f"Role now has {len(visible_ids)} permissions"
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _restore_role_permissions(self, role_id: str, permission_ids: List[str]) -> None:
        if not permission_ids:
            return
        try:
            self.supabase.table("role_permissions").insert([
                {"role_id": role_id, "permission_id": pid} for pid in permission_ids
            ]).execute()
        except Exception as e:
            logger.error(f"Failed to restore permissions of role {role_id}: {e}")
