from fastapi import APIRouter, Depends, HTTPException, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import get_current_admin, get_audit_logger, require_role
from app.database.supabase_client import get_supabase
from app.modules.audit_logs.schemas import AuditLogCreate, AuditLogCreated, AuditLogResponse
from app.modules.audit_logs.service import AuditLogService
from app.modules.auth.schemas import AdminUser

router = APIRouter(prefix="/audit-log", tags=["audit-log"])


def get_audit_log_service(supabase: Client = Depends(get_supabase)) -> AuditLogService:
    return AuditLogService(supabase)


@router.post("", response_model=AuditLogCreated, status_code=201)
async def create_audit_log(
    body: AuditLogCreate,
    request: Request,
    admin: AdminUser = Depends(get_current_admin),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Record an action for the authenticated admin"""
    ok = audit.log(admin, body.action, body.entity_type, body.entity_id, body.details,
                   ip_address=get_client_ip(request))
    if not ok:
        raise HTTPException(status_code=500, detail="Failed to write audit log")
    return AuditLogCreated(success=True)


@router.get("", response_model=List[AuditLogResponse])
async def list_audit_logs(
    action: Optional[str] = None,
    entity: Optional[str] = None,
    admin: AdminUser = Depends(require_role("admin", "super_admin")),
    service: AuditLogService = Depends(get_audit_log_service)
):
    return service.list_logs(action=action, entity=entity)
