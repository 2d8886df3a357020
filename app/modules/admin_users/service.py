import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.core.permissions import PermissionManager
from app.database.supabase_client import get_service_supabase
from app.modules.admin_users.schemas import AdminUserCreate, AdminUserUpdate, AdminUserResponse
from app.modules.auth.schemas import AdminUser

logger = logging.getLogger(__name__)

DEFAULT_ROLE_TYPE = "general_manager"


def normalize_scope_fields(role_type: str, city: Optional[str], region: Optional[int]) -> Tuple[Optional[str], Optional[int]]:
    """Keep only the scope field the role_type uses and require it to be set"""
    if role_type == "branch_manager":
        if not city:
            raise HTTPException(status_code=422, detail="Branch managers require a city")
        return city, None
    if role_type == "regional_manager":
        if not region:
            raise HTTPException(status_code=422, detail="Regional managers require a region")
        return None, region
    return None, None


class AdminUserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _role_type_for(self, role_id: Optional[str], fallback: Optional[str]) -> str:
        """The RBAC role's role_type wins over whatever the client sent"""
        if not role_id:
            return fallback or DEFAULT_ROLE_TYPE
        result = self.supabase.table("roles")\
            .select("id, role_type")\
            .eq("id", role_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Role not found")
        return result.data[0].get("role_type") or DEFAULT_ROLE_TYPE

    def _get_row(self, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("admin_users")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Admin user not found")
        return result.data[0]

    def list_admin_users(self, limit: int = 100, offset: int = 0, is_active: Optional[bool] = None) -> List[AdminUserResponse]:
        try:
            query = self.supabase.table("admin_users").select("*")
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order("full_name").limit(limit).offset(offset).execute()
            return [AdminUserResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_admin_user(self, user_id: str) -> AdminUserResponse:
        try:
            return AdminUserResponse(**self._get_row(user_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_admin_user(self, data: AdminUserCreate, actor: AdminUser) -> AdminUserResponse:
        """Create the auth account, then the admin_users row; roll back the account on failure"""
        if data.role == "super_admin" and not PermissionManager.is_super_admin(actor):
            raise HTTPException(status_code=403, detail="Only super admins can create super admins")

        role_type = self._role_type_for(data.role_id, data.role_type)
        city, region = normalize_scope_fields(role_type, data.city, data.region)

        admin_client = get_service_supabase()
        try:
            auth_response = admin_client.auth.admin.create_user({
                "email": data.email,
                "password": data.password,
                "email_confirm": True,
                "user_metadata": {"full_name": data.full_name}
            })
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

        if not auth_response or not auth_response.user:
            raise HTTPException(status_code=500, detail="User creation failed")

        user_id = auth_response.user.id
        try:
            result = self.supabase.table("admin_users").insert({
                "id": user_id,
                "email": data.email,
                "full_name": data.full_name,
                "role": data.role,
                "role_type": role_type,
                "role_id": data.role_id,
                "city": city,
                "region": region,
                "phone": data.phone,
                "is_active": True
            }).execute()
            if not result.data:
                raise RuntimeError("admin_users insert returned no row")
        except Exception as e:
            logger.error(f"Admin profile insert failed for {data.email}, removing auth user: {e}")
            try:
                admin_client.auth.admin.delete_user(user_id)
            except Exception as cleanup_error:
                logger.error(f"Failed to delete orphan auth user {user_id}: {cleanup_error}")
            raise HTTPException(status_code=500, detail=f"Failed to create admin profile: {e}")

        logger.info(f"Admin user {data.email} created by {actor.id} ({data.role}/{role_type})")
        return AdminUserResponse(**result.data[0])

    def update_admin_user(self, user_id: str, data: AdminUserUpdate, actor: AdminUser) -> AdminUserResponse:
        try:
            current = self._get_row(user_id)
            touches_super_admin = current.get("role") == "super_admin" or data.role == "super_admin"
            if touches_super_admin and not PermissionManager.is_super_admin(actor):
                raise HTTPException(status_code=403, detail="Only super admins can change super admins")

            update_data: Dict[str, Any] = {"updated_at": datetime.utcnow().isoformat()}
            if data.full_name is not None:
                update_data["full_name"] = data.full_name
            if data.role is not None:
                update_data["role"] = data.role
            if data.phone is not None:
                update_data["phone"] = data.phone

            role_id = data.role_id if data.role_id is not None else current.get("role_id")
            if data.role_id is not None:
                update_data["role_id"] = data.role_id
            role_type = self._role_type_for(role_id, data.role_type or current.get("role_type"))
            city, region = normalize_scope_fields(
                role_type,
                data.city if data.city is not None else current.get("city"),
                data.region if data.region is not None else current.get("region"),
            )
            update_data.update({"role_type": role_type, "city": city, "region": region})

            result = self.supabase.table("admin_users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Admin user not found")
            return AdminUserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_active(self, user_id: str, is_active: bool, actor: AdminUser) -> AdminUserResponse:
        if user_id == actor.id and not is_active:
            raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
        try:
            current = self._get_row(user_id)
            if current.get("role") == "super_admin" and not PermissionManager.is_super_admin(actor):
                raise HTTPException(status_code=403, detail="Only super admins can change super admins")
            result = self.supabase.table("admin_users")\
                .update({"is_active": is_active, "updated_at": datetime.utcnow().isoformat()})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Admin user not found")
            return AdminUserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
