"""
Core dependencies for route protection and permission checking.

The authenticated admin is resolved once per request and kept on
``request.state.admin``; handlers receive it (and its row scope) explicitly
instead of reading any global session.
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client
from typing import Callable, Dict, Any
import logging

from app.core.audit import AuditLogger
from app.core.permissions import PermissionManager
from app.core.scope import Scope, resolve_scope
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_audit_logger(supabase: Client = Depends(get_supabase)) -> AuditLogger:
    return AuditLogger(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract current auth user info from JWT token"""
    return auth_service.get_current_user(token)


def get_current_admin(
    request: Request,
    user_data: Dict[str, Any] = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service)
) -> AdminUser:
    """Resolve the active admin for this request"""
    cached = getattr(request.state, "admin", None)
    if cached is not None:
        return cached
    admin = auth_service.get_admin_user(user_data)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access not found"
        )
    request.state.admin = admin
    return admin


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if not PermissionManager.has_permission(admin, required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return admin
    return check_permission


def require_capability(capability: Callable[[Any], bool]):
    """Factory for dependencies backed by a PermissionManager capability check"""
    def check_capability(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if not capability(admin):
            logger.info(f"Admin {admin.id} denied {capability.__name__}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {capability.__name__}"
            )
        return admin
    return check_capability


def require_role(*roles: str):
    """Factory for dependencies that only admit the given admin roles"""
    def check_role(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if admin.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return admin
    return check_role


def get_scope(admin: AdminUser = Depends(get_current_admin)) -> Scope:
    """Row scope of the current admin; raises ScopeError (403) when none can be derived"""
    return resolve_scope(admin)
