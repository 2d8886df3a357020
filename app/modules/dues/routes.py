from fastapi import APIRouter, Depends, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_capability, get_scope, get_audit_logger
from app.core.permissions import PermissionManager
from app.core.scope import Scope
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.dues.schemas import (
    DuePeriodCreate, DuePeriodStatusUpdate, DuePeriodResponse, DuePeriodDetailResponse
)
from app.modules.dues.service import DuesService

router = APIRouter(prefix="/dues", tags=["dues"])

can_view_dues = require_capability(PermissionManager.can_view_dues)
can_manage_dues = require_capability(PermissionManager.can_manage_dues)


def get_dues_service(
    supabase: Client = Depends(get_supabase),
    scope: Scope = Depends(get_scope)
) -> DuesService:
    return DuesService(supabase, scope)


@router.get("/periods", response_model=List[DuePeriodResponse])
async def list_due_periods(
    status: Optional[str] = None,
    admin: AdminUser = Depends(can_view_dues),
    service: DuesService = Depends(get_dues_service)
):
    """Due periods, newest due date first; status accepts a comma separated list"""
    return service.list_periods(status)


@router.post("/periods", response_model=DuePeriodResponse, status_code=201)
async def create_due_period(
    body: DuePeriodCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_dues),
    service: DuesService = Depends(get_dues_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Create a period and optionally generate the member dues rows for it"""
    created = service.create_period(body)
    audit.log(admin, "CREATE", "DUES", created.id, {
        "name": created.name,
        "generated_member_count": created.generated_member_count
    }, ip_address=get_client_ip(request))
    return created


@router.get("/periods/{period_id}", response_model=DuePeriodDetailResponse)
async def get_due_period(
    period_id: str,
    admin: AdminUser = Depends(can_view_dues),
    service: DuesService = Depends(get_dues_service)
):
    return service.get_period(period_id)


@router.patch("/periods/{period_id}", response_model=DuePeriodResponse)
async def update_due_period_status(
    period_id: str,
    body: DuePeriodStatusUpdate,
    request: Request,
    admin: AdminUser = Depends(can_manage_dues),
    service: DuesService = Depends(get_dues_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    updated = service.update_status(period_id, body.status)
    audit.log(admin, "UPDATE", "DUES", period_id, {"status": body.status},
              ip_address=get_client_ip(request))
    return updated
