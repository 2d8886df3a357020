from fastapi import APIRouter, Depends, Query, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_capability, get_current_admin, get_audit_logger
from app.core.permissions import PermissionManager
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.definitions.schemas import DefinitionCreate, DefinitionUpdate, DefinitionResponse, DefinitionType
from app.modules.definitions.service import DefinitionService

router = APIRouter(prefix="/definitions", tags=["definitions"])

can_manage_definitions = require_capability(PermissionManager.can_manage_definitions)


def get_definition_service(supabase: Client = Depends(get_supabase)) -> DefinitionService:
    return DefinitionService(supabase)


@router.get("", response_model=List[DefinitionResponse])
async def list_definitions(
    definition_type: Optional[DefinitionType] = Query(None, alias="type"),
    include_inactive: bool = False,
    admin: AdminUser = Depends(get_current_admin),
    service: DefinitionService = Depends(get_definition_service)
):
    """Selectable values (workplaces, positions, titles, resignation reasons)"""
    return service.list_definitions(definition_type, include_inactive)


@router.post("", response_model=DefinitionResponse, status_code=201)
async def create_definition(
    body: DefinitionCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_definitions),
    service: DefinitionService = Depends(get_definition_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    created = service.create_definition(body)
    audit.log(admin, "CREATE", "DEFINITION", created.id,
              {"type": created.definition_type, "name": created.name}, ip_address=get_client_ip(request))
    return created


@router.put("/{definition_id}", response_model=DefinitionResponse)
async def update_definition(
    definition_id: str,
    body: DefinitionUpdate,
    admin: AdminUser = Depends(can_manage_definitions),
    service: DefinitionService = Depends(get_definition_service)
):
    return service.update_definition(definition_id, body)


@router.delete("/{definition_id}", status_code=204)
async def delete_definition(
    definition_id: str,
    request: Request,
    admin: AdminUser = Depends(can_manage_definitions),
    service: DefinitionService = Depends(get_definition_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    service.delete_definition(definition_id)
    audit.log(admin, "DELETE", "DEFINITION", definition_id, ip_address=get_client_ip(request))
    return None
