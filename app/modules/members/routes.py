from datetime import date
from fastapi import APIRouter, Depends, UploadFile, File, Form, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_permission, get_scope, get_audit_logger
from app.core.scope import Scope
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.members.schemas import (
    MemberCreate, MemberUpdate, MemberResponse, MemberListResponse,
    MemberDocumentResponse, ResignationRequest, ResignationResponse, DocumentType
)
from app.modules.members.service import MemberService

router = APIRouter(prefix="/members", tags=["members"])


def get_member_service(
    supabase: Client = Depends(get_supabase),
    scope: Scope = Depends(get_scope)
) -> MemberService:
    return MemberService(supabase, scope)


@router.get("", response_model=MemberListResponse)
async def list_members(
    status: Optional[str] = None,
    city: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    admin: AdminUser = Depends(require_permission("members.view")),
    service: MemberService = Depends(get_member_service)
):
    """List members visible to the admin; status accepts a comma separated list"""
    return service.list_members(status=status, city=city, search=search, limit=limit, offset=offset)


@router.post("", response_model=MemberResponse, status_code=201)
async def create_member(
    body: MemberCreate,
    request: Request,
    admin: AdminUser = Depends(require_permission("members.create")),
    service: MemberService = Depends(get_member_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    created = service.create_member(body)
    audit.log(admin, "CREATE", "MEMBER", created.id,
              {"name": f"{created.first_name} {created.last_name}"}, ip_address=get_client_ip(request))
    return created


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    admin: AdminUser = Depends(require_permission("members.view")),
    service: MemberService = Depends(get_member_service)
):
    return service.get_member(member_id)


@router.put("/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: str,
    body: MemberUpdate,
    request: Request,
    admin: AdminUser = Depends(require_permission("members.update")),
    service: MemberService = Depends(get_member_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    updated = service.update_member(member_id, body, admin)
    audit.log(admin, "UPDATE", "MEMBER", member_id, body.model_dump(exclude_none=True),
              ip_address=get_client_ip(request))
    return updated


@router.get("/{member_id}/documents", response_model=List[MemberDocumentResponse])
async def list_member_documents(
    member_id: str,
    admin: AdminUser = Depends(require_permission("members.documents")),
    service: MemberService = Depends(get_member_service)
):
    return service.list_documents(member_id)


@router.post("/{member_id}/documents", response_model=MemberDocumentResponse, status_code=201)
async def upload_member_document(
    member_id: str,
    file: UploadFile = File(...),
    document_type: DocumentType = Form("other"),
    admin: AdminUser = Depends(require_permission("members.documents")),
    service: MemberService = Depends(get_member_service)
):
    """Attach a PDF, JPEG or PNG file (max 10MB) to the member"""
    content = await file.read()
    return service.upload_document(
        member_id, content, file.filename or "document", file.content_type,
        document_type, admin
    )


@router.delete("/{member_id}/documents/{document_id}", status_code=204)
async def delete_member_document(
    member_id: str,
    document_id: str,
    admin: AdminUser = Depends(require_permission("members.documents")),
    service: MemberService = Depends(get_member_service)
):
    service.delete_document(member_id, document_id)
    return None


@router.post("/{member_id}/resign", response_model=ResignationResponse)
async def resign_member(
    member_id: str,
    request: Request,
    file: UploadFile = File(...),
    reason_code: str = Form(...),
    effective_date: date = Form(...),
    confirm_name: str = Form(...),
    notify_sms: bool = Form(False),
    notify_email: bool = Form(False),
    admin: AdminUser = Depends(require_permission("members.resign")),
    service: MemberService = Depends(get_member_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """
    Resign an active member.
    Requires the signed petition file and the member's full name typed
    exactly as stored. Nothing is changed if any step fails.
    """
    body = ResignationRequest(
        reason_code=reason_code,
        effective_date=effective_date,
        confirm_name=confirm_name,
        notify_sms=notify_sms,
        notify_email=notify_email
    )
    content = await file.read()
    result = service.resign_member(
        member_id, body, content, file.filename or "petition", file.content_type, admin
    )
    audit.log(admin, "UPDATE", "MEMBER", member_id, {
        "action": "resign",
        "reason_id": body.reason_code,
        "effective_date": body.effective_date.isoformat(),
        "document_id": result.document.id
    }, ip_address=get_client_ip(request))
    return result
