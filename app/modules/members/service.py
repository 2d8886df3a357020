import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.core.exceptions import AuthorizationError
from app.core.permissions import PermissionManager
from app.core.scope import Scope, ScopedTable
from app.database.storage import get_storage
from app.modules.auth.schemas import AdminUser
from app.modules.members.schemas import (
    MemberCreate, MemberUpdate, MemberResponse, MemberListResponse,
    MemberDocumentResponse, ResignationRequest, ResignationResponse
)
from app.modules.notifications.schemas import NotificationChannels
from app.modules.notifications.service import NotificationService

logger = logging.getLogger(__name__)

RESTRICTED_FIELDS = {"tc_identity", "membership_number", "city", "region"}
DOCUMENT_CONTENT_TYPES = {"application/pdf", "image/jpeg", "image/jpg", "image/png"}
RESIGNATION_REASON_TYPE = "resignation_reason"


def expected_confirmation_name(member: Dict[str, Any]) -> str:
    return f"{member.get('first_name') or ''} {member.get('last_name') or ''}"


def confirmation_matches(member: Dict[str, Any], typed_name: str) -> bool:
    """Exact, case- and whitespace-sensitive comparison with "first_name last_name"."""
    return typed_name == expected_confirmation_name(member)


def validate_document_file(content: bytes, content_type: Optional[str]) -> None:
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")
    if content_type not in DOCUMENT_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only PDF, JPEG and PNG files are accepted")
    if len(content) > settings.max_document_size_mb * 1024 * 1024:
        raise HTTPException(status_code=400, detail=f"File must be smaller than {settings.max_document_size_mb}MB")


def file_extension(filename: Optional[str]) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    return "bin"


class MemberService:
    def __init__(self, supabase: Client, scope: Scope):
        self.supabase = supabase
        self.scope = scope
        self.members = ScopedTable(supabase, "members", scope)

    def _get_member_row(self, member_id: str) -> Dict[str, Any]:
        """Member inside the admin's scope; rows outside it are reported as missing"""
        row = self.members.get(member_id)
        if row is None:
            raise HTTPException(status_code=404, detail="Member not found")
        return row

    def list_members(
        self,
        status: Optional[str] = None,
        city: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> MemberListResponse:
        try:
            query = self.members.select("*", count="exact")
            if status:
                statuses = [s.strip() for s in status.split(",") if s.strip()]
                if len(statuses) == 1:
                    query = query.eq("membership_status", statuses[0])
                elif statuses:
                    query = query.in_("membership_status", statuses)
            if city:
                query = query.eq("city", city)
            if search:
                term = search.replace(",", " ").strip()
                query = query.or_(f"first_name.ilike.%{term}%,last_name.ilike.%{term}%")
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            data = [MemberResponse(**row) for row in result.data or []]
            return MemberListResponse(data=data, count=result.count if result.count is not None else len(data))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_member(self, member_id: str) -> MemberResponse:
        try:
            return MemberResponse(**self._get_member_row(member_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_member(self, data: MemberCreate) -> MemberResponse:
        try:
            payload = data.model_dump(exclude_none=True)
            payload.update({"membership_status": "pending", "is_active": False})
            result = self.members.insert(payload)
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create member")
            return MemberResponse(**result.data[0])
        except HTTPException:
            raise
        except AuthorizationError:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_member(self, member_id: str, data: MemberUpdate, admin: AdminUser) -> MemberResponse:
        try:
            current = self._get_member_row(member_id)
            update_data = data.model_dump(exclude_none=True)

            restricted = RESTRICTED_FIELDS & update_data.keys()
            changed = {f for f in restricted if update_data[f] != current.get(f)}
            if changed and not PermissionManager.can_edit_restricted_fields(admin):
                raise HTTPException(
                    status_code=403,
                    detail=f"Only super admins can change: {', '.join(sorted(changed))}"
                )

            if "membership_status" in update_data:
                if current.get("membership_status") == "resigned":
                    raise HTTPException(status_code=409, detail="Resigned members cannot be reactivated")
                update_data["is_active"] = update_data["membership_status"] == "active"

            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.members.update(member_id, update_data)
            if not result.data:
                raise HTTPException(status_code=404, detail="Member not found")
            return MemberResponse(**result.data[0])
        except HTTPException:
            raise
        except AuthorizationError:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Documents

    def list_documents(self, member_id: str) -> List[MemberDocumentResponse]:
        try:
            self._get_member_row(member_id)
            result = self.supabase.table("member_documents")\
                .select("*")\
                .eq("member_id", member_id)\
                .order("created_at", desc=True)\
                .execute()
            return [MemberDocumentResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _store_document(
        self,
        member_id: str,
        content: bytes,
        filename: str,
        content_type: str,
        document_type: str,
        admin: AdminUser,
        file_path: str,
    ) -> Dict[str, Any]:
        """Insert the member_documents row for an already uploaded file"""
        storage = get_storage(self.supabase, settings.member_documents_bucket)
        result = self.supabase.table("member_documents").insert({
            "member_id": member_id,
            "document_type": document_type,
            "file_name": filename,
            "file_path": file_path,
            "file_url": storage.get_public_url(file_path),
            "file_size": len(content),
            "mime_type": content_type,
            "uploaded_by": admin.id
        }).execute()
        if not result.data:
            raise RuntimeError("member_documents insert returned no row")
        return result.data[0]

    def upload_document(
        self,
        member_id: str,
        content: bytes,
        filename: str,
        content_type: str,
        document_type: str,
        admin: AdminUser,
    ) -> MemberDocumentResponse:
        validate_document_file(content, content_type)
        self._get_member_row(member_id)
        storage = get_storage(self.supabase, settings.member_documents_bucket)
        file_path = f"{member_id}/{document_type}_{int(time.time() * 1000)}.{file_extension(filename)}"
        try:
            storage.upload_file(content, file_path, content_type)
        except Exception as e:
            logger.error(f"Document upload failed for member {member_id}: {e}")
            raise HTTPException(status_code=502, detail="File upload failed")
        try:
            row = self._store_document(member_id, content, filename, content_type, document_type, admin, file_path)
        except Exception as e:
            storage.delete_file(file_path)
            raise HTTPException(status_code=500, detail=str(e))
        return MemberDocumentResponse(**row)

    def delete_document(self, member_id: str, document_id: str) -> bool:
        try:
            self._get_member_row(member_id)
            result = self.supabase.table("member_documents")\
                .select("*")\
                .eq("id", document_id)\
                .eq("member_id", member_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Document not found")
            document = result.data[0]
            storage = get_storage(self.supabase, settings.member_documents_bucket)
            if document.get("file_path") and not storage.delete_file(document["file_path"]):
                raise HTTPException(status_code=502, detail="File could not be removed from storage")
            self.supabase.table("member_documents").delete().eq("id", document_id).execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Resignation

    def _validate_reason(self, reason_code: str) -> Dict[str, Any]:
        result = self.supabase.table("general_definitions")\
            .select("id, name")\
            .eq("id", reason_code)\
            .eq("definition_type", RESIGNATION_REASON_TYPE)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=400, detail="Unknown resignation reason")
        return result.data[0]

    def resign_member(
        self,
        member_id: str,
        request: ResignationRequest,
        content: bytes,
        filename: str,
        content_type: str,
        admin: AdminUser,
    ) -> ResignationResponse:
        """
        Move an active member to resigned.

        The petition upload, the document row and any queued notifications are
        undone when a later step fails, and the status update runs last and only
        matches a still-active member, so the member either ends up resigned
        with every side effect in place or stays exactly as it was.
        """
        member = self._get_member_row(member_id)
        if not confirmation_matches(member, request.confirm_name):
            raise HTTPException(status_code=400, detail="Confirmation name does not match the member's full name")
        if member.get("membership_status") != "active":
            raise HTTPException(status_code=409, detail="Only active members can resign")
        validate_document_file(content, content_type)
        reason = self._validate_reason(request.reason_code)

        storage = get_storage(self.supabase, settings.member_documents_bucket)
        notifications = NotificationService(self.supabase)
        file_path = f"{member_id}/resignation_{member_id}_{int(time.time() * 1000)}.{file_extension(filename)}"
        uploaded = False
        document: Optional[Dict[str, Any]] = None
        notification_ids: List[str] = []

        try:
            try:
                storage.upload_file(content, file_path, content_type)
            except Exception as e:
                logger.error(f"Resignation petition upload failed for member {member_id}: {e}")
                raise HTTPException(status_code=502, detail="Petition upload failed; membership status unchanged")
            uploaded = True

            document = self._store_document(
                member_id, content, filename, content_type, "resignation_petition", admin, file_path
            )

            channels = NotificationChannels(sms=request.notify_sms, email=request.notify_email)
            notification_ids = notifications.notify_member(
                member, channels,
                subject="Membership resignation",
                message=(
                    f"Dear {expected_confirmation_name(member)}, your resignation "
                    f"effective {request.effective_date.isoformat()} has been recorded."
                ),
                created_by=admin.id,
            )

            result = self.members.update(
                member_id,
                {
                    "membership_status": "resigned",
                    "is_active": False,
                    "resignation_reason_id": reason["id"],
                    "resignation_date": request.effective_date.isoformat(),
                    "updated_at": datetime.utcnow().isoformat(),
                },
                guard={"membership_status": "active"},
            )
            if not result.data:
                raise HTTPException(status_code=409, detail="Member is no longer active")
        except Exception as e:
            self._rollback_resignation(storage, notifications, file_path if uploaded else None, document, notification_ids)
            if isinstance(e, HTTPException):
                raise
            logger.error(f"Resignation of member {member_id} aborted: {e}")
            raise HTTPException(status_code=500, detail="Resignation failed; membership status unchanged")

        logger.info(f"Member {member_id} resigned by admin {admin.id}")
        return ResignationResponse(
            member=MemberResponse(**result.data[0]),
            document=MemberDocumentResponse(**document),
            notifications_queued=len(notification_ids),
        )

    def _rollback_resignation(
        self,
        storage,
        notifications: NotificationService,
        file_path: Optional[str],
        document: Optional[Dict[str, Any]],
        notification_ids: List[str],
    ) -> None:
        notifications.remove(notification_ids)
        if document is not None:
            try:
                self.supabase.table("member_documents").delete().eq("id", document["id"]).execute()
            except Exception as e:
                logger.error(f"Failed to remove document row {document['id']} during rollback: {e}")
        if file_path:
            storage.delete_file(file_path)
