from fastapi import APIRouter, Depends, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_capability, get_audit_logger
from app.core.permissions import PermissionManager
from app.database.supabase_client import get_supabase
from app.modules.admin_users.schemas import (
    AdminUserCreate, AdminUserUpdate, AdminUserActiveUpdate, AdminUserResponse
)
from app.modules.admin_users.service import AdminUserService
from app.modules.auth.schemas import AdminUser

router = APIRouter(prefix="/admin-users", tags=["admin-users"])

can_manage_users = require_capability(PermissionManager.can_manage_users)


def get_admin_user_service(supabase: Client = Depends(get_supabase)) -> AdminUserService:
    return AdminUserService(supabase)


@router.get("", response_model=List[AdminUserResponse])
async def list_admin_users(
    limit: int = 100,
    offset: int = 0,
    is_active: Optional[bool] = None,
    admin: AdminUser = Depends(can_manage_users),
    service: AdminUserService = Depends(get_admin_user_service)
):
    return service.list_admin_users(limit=limit, offset=offset, is_active=is_active)


@router.post("", response_model=AdminUserResponse, status_code=201)
async def create_admin_user(
    body: AdminUserCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_users),
    service: AdminUserService = Depends(get_admin_user_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Create an admin account; role_type comes from the selected role when given"""
    created = service.create_admin_user(body, admin)
    audit.log(admin, "CREATE", "USER", created.id, {"email": created.email, "role": created.role},
              ip_address=get_client_ip(request))
    return created


@router.get("/{user_id}", response_model=AdminUserResponse)
async def get_admin_user(
    user_id: str,
    admin: AdminUser = Depends(can_manage_users),
    service: AdminUserService = Depends(get_admin_user_service)
):
    return service.get_admin_user(user_id)


@router.put("/{user_id}", response_model=AdminUserResponse)
async def update_admin_user(
    user_id: str,
    body: AdminUserUpdate,
    request: Request,
    admin: AdminUser = Depends(can_manage_users),
    service: AdminUserService = Depends(get_admin_user_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    updated = service.update_admin_user(user_id, body, admin)
    audit.log(admin, "UPDATE", "USER", user_id, body.model_dump(exclude_none=True),
              ip_address=get_client_ip(request))
    return updated


@router.post("/{user_id}/active", response_model=AdminUserResponse)
async def set_admin_user_active(
    user_id: str,
    body: AdminUserActiveUpdate,
    admin: AdminUser = Depends(can_manage_users),
    service: AdminUserService = Depends(get_admin_user_service)
):
    """Activate or deactivate an admin account"""
    return service.set_active(user_id, body.is_active, admin)
