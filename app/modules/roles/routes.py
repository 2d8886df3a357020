from fastapi import APIRouter, Depends
from supabase import Client
from typing import List

from app.core.dependencies import require_capability
from app.core.permissions import PermissionManager
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.roles.schemas import (
    PermissionGroupResponse,
    RoleCreate, RoleUpdate, RoleResponse, RoleWithPermissionsResponse,
    RolePermissionsUpdate, RolePermissionsUpdateResponse
)
from app.modules.roles.service import RoleService, PermissionService

router = APIRouter(prefix="/roles", tags=["roles"])

can_manage_definitions = require_capability(PermissionManager.can_manage_definitions)


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


def get_permission_service(supabase: Client = Depends(get_supabase)) -> PermissionService:
    return PermissionService(supabase)


@router.get("/permissions", response_model=List[PermissionGroupResponse])
async def list_permission_groups(
    admin: AdminUser = Depends(can_manage_definitions),
    service: PermissionService = Depends(get_permission_service)
):
    """Permissions grouped by group_name; the users group is only listed for super admins"""
    return service.list_grouped(admin)


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    limit: int = 100,
    offset: int = 0,
    admin: AdminUser = Depends(can_manage_definitions),
    service: RoleService = Depends(get_role_service)
):
    return service.list_roles(limit=limit, offset=offset)


@router.post("", response_model=RoleWithPermissionsResponse, status_code=201)
async def create_role(
    role_data: RoleCreate,
    admin: AdminUser = Depends(can_manage_definitions),
    service: RoleService = Depends(get_role_service)
):
    """Create a role and assign its permissions"""
    return service.create_role(role_data, admin)


@router.get("/{role_id}", response_model=RoleWithPermissionsResponse)
async def get_role(
    role_id: str,
    admin: AdminUser = Depends(can_manage_definitions),
    service: RoleService = Depends(get_role_service)
):
    return service.get_role_with_permissions(role_id, admin)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    admin: AdminUser = Depends(can_manage_definitions),
    service: RoleService = Depends(get_role_service)
):
    return service.update_role(role_id, role_data)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    admin: AdminUser = Depends(can_manage_definitions),
    service: RoleService = Depends(get_role_service)
):
    service.delete_role(role_id)
    return None


@router.put("/{role_id}/permissions", response_model=RolePermissionsUpdateResponse)
async def replace_role_permissions(
    role_id: str,
    body: RolePermissionsUpdate,
    admin: AdminUser = Depends(can_manage_definitions),
    service: RoleService = Depends(get_role_service)
):
    """Replace all permissions for a role"""
    return service.replace_role_permissions(role_id, body.permission_ids, admin)
