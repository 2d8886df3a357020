from fastapi import APIRouter, Depends, UploadFile, File, Query, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_permission, require_capability, get_audit_logger
from app.core.permissions import PermissionManager
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.documents.schemas import (
    DecisionCreate, DecisionUpdate, DecisionResponse, BoardType, DecisionStatus,
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentType, DocumentStatus,
    AttachmentResponse, SequenceRequest, SequenceResponse,
    TemplateCreate, TemplateUpdate, TemplateResponse
)
from app.modules.documents.service import DocumentService

router = APIRouter(tags=["documents"])

can_view_documents = require_permission("documents.view")
can_manage_documents = require_permission("documents.manage")
can_manage_decisions = require_permission("decisions.manage")
can_manage_templates = require_capability(PermissionManager.can_manage_templates)


def get_document_service(supabase: Client = Depends(get_supabase)) -> DocumentService:
    return DocumentService(supabase)


# Decisions

@router.get("/decisions", response_model=List[DecisionResponse])
async def list_decisions(
    board_type: Optional[BoardType] = None,
    status: Optional[DecisionStatus] = None,
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.list_decisions(board_type, status)


@router.post("/decisions", response_model=DecisionResponse, status_code=201)
async def create_decision(
    body: DecisionCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_decisions),
    service: DocumentService = Depends(get_document_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    created = service.create_decision(body, admin)
    audit.log(admin, "CREATE", "DECISION", created.id,
              {"title": created.title, "number": created.decision_number}, ip_address=get_client_ip(request))
    return created


@router.get("/decisions/{decision_id}", response_model=DecisionResponse)
async def get_decision(
    decision_id: str,
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.get_decision(decision_id)


@router.put("/decisions/{decision_id}", response_model=DecisionResponse)
async def update_decision(
    decision_id: str,
    body: DecisionUpdate,
    request: Request,
    admin: AdminUser = Depends(can_manage_decisions),
    service: DocumentService = Depends(get_document_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    updated = service.update_decision(decision_id, body)
    audit.log(admin, "UPDATE", "DECISION", decision_id, body.model_dump(mode="json", exclude_none=True),
              ip_address=get_client_ip(request))
    return updated


@router.get("/decisions/{decision_id}/attachments", response_model=List[AttachmentResponse])
async def list_decision_attachments(
    decision_id: str,
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.list_attachments("decision", decision_id)


@router.post("/decisions/{decision_id}/attachments", response_model=AttachmentResponse, status_code=201)
async def upload_decision_attachment(
    decision_id: str,
    file: UploadFile = File(...),
    admin: AdminUser = Depends(can_manage_decisions),
    service: DocumentService = Depends(get_document_service)
):
    content = await file.read()
    return service.upload_attachment("decision", decision_id, content, file.filename, file.content_type, admin)


# Templates

@router.get("/document-templates", response_model=List[TemplateResponse])
async def list_templates(
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.list_templates()


@router.post("/document-templates", response_model=TemplateResponse, status_code=201)
async def create_template(
    body: TemplateCreate,
    admin: AdminUser = Depends(can_manage_templates),
    service: DocumentService = Depends(get_document_service)
):
    return service.create_template(body, admin)


@router.put("/document-templates/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    admin: AdminUser = Depends(can_manage_templates),
    service: DocumentService = Depends(get_document_service)
):
    return service.update_template(template_id, body)


@router.delete("/document-templates/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    admin: AdminUser = Depends(can_manage_templates),
    service: DocumentService = Depends(get_document_service)
):
    service.delete_template(template_id)
    return None


# Documents

@router.post("/documents/sequence", response_model=SequenceResponse)
async def reserve_document_number(
    body: SequenceRequest,
    admin: AdminUser = Depends(can_manage_documents),
    service: DocumentService = Depends(get_document_service)
):
    """Reserve the next number for a decision or document type (current year by default)"""
    return service.next_number(body.type, body.year)


@router.get("/documents", response_model=List[DocumentResponse])
async def list_documents(
    document_type: Optional[DocumentType] = Query(None, alias="type"),
    status: Optional[DocumentStatus] = None,
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.list_documents(document_type, status)


@router.post("/documents", response_model=DocumentResponse, status_code=201)
async def create_document(
    body: DocumentCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_documents),
    service: DocumentService = Depends(get_document_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Register a document; its number is generated from the type and reference year"""
    created = service.create_document(body, admin)
    audit.log(admin, "CREATE", "DOCUMENT", created.id,
              {"type": created.type, "number": created.document_number}, ip_address=get_client_ip(request))
    return created


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.get_document(document_id)


@router.put("/documents/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    body: DocumentUpdate,
    admin: AdminUser = Depends(can_manage_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.update_document(document_id, body)


@router.get("/documents/{document_id}/attachments", response_model=List[AttachmentResponse])
async def list_document_attachments(
    document_id: str,
    admin: AdminUser = Depends(can_view_documents),
    service: DocumentService = Depends(get_document_service)
):
    return service.list_attachments("document", document_id)


@router.post("/documents/{document_id}/attachments", response_model=AttachmentResponse, status_code=201)
async def upload_document_attachment(
    document_id: str,
    file: UploadFile = File(...),
    admin: AdminUser = Depends(can_manage_documents),
    service: DocumentService = Depends(get_document_service)
):
    content = await file.read()
    return service.upload_attachment("document", document_id, content, file.filename, file.content_type, admin)
