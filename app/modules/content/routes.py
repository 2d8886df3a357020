from fastapi import APIRouter, Depends, UploadFile, File, Request
from supabase import Client
from typing import List

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_capability, get_audit_logger
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.content.schemas import ImageUploadResponse
from app.modules.content.service import ContentKind, ContentService, CONTENT_KINDS


def build_content_router(kind: ContentKind) -> APIRouter:
    """CRUD, public listing and image upload routes for one content kind"""
    router = APIRouter(prefix=f"/{kind.name}", tags=[kind.name])
    can_manage = require_capability(kind.capability)
    create_schema = kind.create_schema
    update_schema = kind.update_schema
    response_schema = kind.response_schema

    def get_service(supabase: Client = Depends(get_supabase)) -> ContentService:
        return ContentService(supabase, kind)

    @router.get("/public", response_model=List[response_schema])
    async def list_public_items(
        limit: int = 50,
        offset: int = 0,
        service: ContentService = Depends(get_service)
    ):
        """Visible items for the public site; no authentication"""
        return service.list_public(limit=limit, offset=offset)

    @router.get("", response_model=List[response_schema])
    async def list_items(
        limit: int = 50,
        offset: int = 0,
        admin: AdminUser = Depends(can_manage),
        service: ContentService = Depends(get_service)
    ):
        return service.list_items(limit=limit, offset=offset)

    @router.post("", response_model=response_schema, status_code=201)
    async def create_item(
        body: create_schema,
        request: Request,
        admin: AdminUser = Depends(can_manage),
        service: ContentService = Depends(get_service),
        audit: AuditLogger = Depends(get_audit_logger)
    ):
        created = service.create_item(body, admin)
        audit.log(admin, "CREATE", kind.audit_entity, created.id, {"title": created.title},
                  ip_address=get_client_ip(request))
        return created

    @router.get("/{item_id}", response_model=response_schema)
    async def get_item(
        item_id: str,
        admin: AdminUser = Depends(can_manage),
        service: ContentService = Depends(get_service)
    ):
        return service.get_item(item_id)

    @router.put("/{item_id}", response_model=response_schema)
    async def update_item(
        item_id: str,
        body: update_schema,
        request: Request,
        admin: AdminUser = Depends(can_manage),
        service: ContentService = Depends(get_service),
        audit: AuditLogger = Depends(get_audit_logger)
    ):
        updated = service.update_item(item_id, body)
        audit.log(admin, "UPDATE", kind.audit_entity, item_id, body.model_dump(exclude_none=True),
                  ip_address=get_client_ip(request))
        return updated

    @router.delete("/{item_id}", status_code=204)
    async def delete_item(
        item_id: str,
        request: Request,
        admin: AdminUser = Depends(can_manage),
        service: ContentService = Depends(get_service),
        audit: AuditLogger = Depends(get_audit_logger)
    ):
        service.delete_item(item_id)
        audit.log(admin, "DELETE", kind.audit_entity, item_id, ip_address=get_client_ip(request))
        return None

    @router.post("/{item_id}/image", response_model=ImageUploadResponse)
    async def upload_item_image(
        item_id: str,
        file: UploadFile = File(...),
        admin: AdminUser = Depends(can_manage),
        service: ContentService = Depends(get_service)
    ):
        """Upload a JPEG, PNG, GIF or WebP image (max 5MB)"""
        content = await file.read()
        return service.upload_image(item_id, content, file.filename, file.content_type)

    return router


routers = [build_content_router(kind) for kind in CONTENT_KINDS]
