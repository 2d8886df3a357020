import hashlib
import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.database.supabase_client import get_service_supabase
from app.modules.auth.schemas import AdminUser, LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

ADMIN_COLUMNS = "id, email, full_name, role, role_type, role_id, city, region, phone, is_active"


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate with Supabase Auth and require an active admin_users row"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            logger.info(f"Login rejected for {login_data.email}: {e}")
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        admin = self.get_admin_user({"id": auth_response.user.id, "email": auth_response.user.email})
        if admin is None:
            try:
                self.supabase.auth.sign_out()
            except Exception as e:
                logger.warning(f"Sign-out after rejected admin login failed: {e}")
            raise HTTPException(status_code=403, detail="Admin access not found")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user=admin
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def _find_admin_row(self, column: str, value: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("admin_users")\
            .select(ADMIN_COLUMNS)\
            .eq(column, value)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_role_permissions(self, role_id: Optional[str]) -> List[str]:
        """Return permission keys of an RBAC role"""
        if not role_id:
            return []
        try:
            result = self.supabase.table("role_permissions")\
                .select("permission_id")\
                .eq("role_id", role_id)\
                .execute()
            permission_ids = [rp["permission_id"] for rp in result.data or []]
            if not permission_ids:
                return []
            permissions_result = self.supabase.table("permissions")\
                .select("key")\
                .in_("id", permission_ids)\
                .execute()
            return sorted({p["key"] for p in permissions_result.data or [] if p.get("key")})
        except Exception as e:
            logger.error(f"Error getting role permissions: {e}")
            return []

    def get_admin_user(self, user_data: Dict[str, Any]) -> Optional[AdminUser]:
        """Resolve the active admin_users row for an auth user (by id, then by email)"""
        try:
            row = self._find_admin_row("id", user_data["id"])
            if row is None and user_data.get("email"):
                row = self._find_admin_row("email", user_data["email"])
        except Exception as e:
            logger.error(f"Admin lookup failed for {user_data.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="Could not verify admin access")
        if row is None:
            return None
        return AdminUser(**row, permissions=self.get_role_permissions(row.get("role_id")))

    def logout(self) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Supabase Auth tokens are stateless JWTs, logout is mainly client-side
            self.supabase.auth.sign_out()
            return True
        except Exception:
            return False

    def update_password(self, user_id: str, new_password: str) -> bool:
        """Set a new password for the admin (requires service role key)"""
        try:
            admin_client = get_service_supabase()
            response = admin_client.auth.admin.update_user_by_id(user_id, {"password": new_password})
            if not response.user:
                raise HTTPException(status_code=404, detail="User not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update password: {str(e)}")
