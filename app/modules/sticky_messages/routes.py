from fastapi import APIRouter, Depends, Request
from supabase import Client
from typing import Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_capability, get_audit_logger
from app.core.permissions import PermissionManager
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.sticky_messages.schemas import StickyMessageCreate, StickyMessageResponse
from app.modules.sticky_messages.service import StickyMessageService

router = APIRouter(prefix="/sticky-messages", tags=["sticky-messages"])

can_manage_sticky_messages = require_capability(PermissionManager.can_manage_sticky_messages)


def get_sticky_message_service(supabase: Client = Depends(get_supabase)) -> StickyMessageService:
    return StickyMessageService(supabase)


@router.get("/current", response_model=Optional[StickyMessageResponse])
async def get_current_sticky_message(
    service: StickyMessageService = Depends(get_sticky_message_service)
):
    """Message shown in the site banner; public"""
    return service.get_current()


@router.post("", response_model=StickyMessageResponse, status_code=201)
async def publish_sticky_message(
    body: StickyMessageCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_sticky_messages),
    service: StickyMessageService = Depends(get_sticky_message_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    created = service.publish(body, admin)
    audit.log(admin, "CREATE", "STICKY_MESSAGE", created.id, {"message": created.message},
              ip_address=get_client_ip(request))
    return created


@router.delete("/{message_id}", status_code=204)
async def clear_sticky_message(
    message_id: str,
    request: Request,
    admin: AdminUser = Depends(can_manage_sticky_messages),
    service: StickyMessageService = Depends(get_sticky_message_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    service.clear(message_id)
    audit.log(admin, "DELETE", "STICKY_MESSAGE", message_id, ip_address=get_client_ip(request))
    return None
