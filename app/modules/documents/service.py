import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.database.storage import get_storage
from app.modules.auth.schemas import AdminUser
from app.modules.documents.schemas import (
    DecisionCreate, DecisionUpdate, DecisionResponse,
    DocumentCreate, DocumentUpdate, DocumentResponse,
    AttachmentResponse, SequenceResponse,
    TemplateCreate, TemplateUpdate, TemplateResponse
)

logger = logging.getLogger(__name__)

# Middle segment of the number per sequence type; outgoing and decisions have none
NUMBER_MARKERS = {"decision": None, "outgoing": None, "incoming": "E", "internal": "I"}


def format_document_number(sequence_type: str, year: int, sequence: int) -> str:
    """2024/001 for decisions and outgoing, 2024/E/001 incoming, 2024/I/001 internal"""
    marker = NUMBER_MARKERS.get(sequence_type)
    padded = str(sequence).zfill(3)
    if marker:
        return f"{year}/{marker}/{padded}"
    return f"{year}/{padded}"


class DocumentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Sequence

    def next_number(self, sequence_type: str, year: Optional[int] = None) -> SequenceResponse:
        """Reserve the next number; the RPC increments the counter atomically"""
        year = year or datetime.utcnow().year
        try:
            result = self.supabase.rpc("get_next_dm_sequence", {
                "p_year": year,
                "p_type": sequence_type
            }).execute()
        except Exception as e:
            logger.error(f"Error generating {sequence_type} sequence for {year}: {e}")
            raise HTTPException(status_code=500, detail="Could not generate document number")
        sequence = result.data
        if isinstance(sequence, list):
            sequence = sequence[0] if sequence else None
        if sequence is None:
            raise HTTPException(status_code=500, detail="Could not generate document number")
        return SequenceResponse(
            type=sequence_type,
            year=year,
            number=format_document_number(sequence_type, year, int(sequence))
        )

    # Decisions

    def _get_decision_row(self, decision_id: str) -> Dict[str, Any]:
        result = self.supabase.table("dm_decisions")\
            .select("*")\
            .eq("id", decision_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Decision not found")
        return result.data[0]

    def list_decisions(self, board_type: Optional[str] = None, status: Optional[str] = None) -> List[DecisionResponse]:
        try:
            query = self.supabase.table("dm_decisions").select("*")
            if board_type:
                query = query.eq("board_type", board_type)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return [DecisionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_decision(self, decision_id: str) -> DecisionResponse:
        try:
            return DecisionResponse(**self._get_decision_row(decision_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_decision(self, data: DecisionCreate, admin: AdminUser) -> DecisionResponse:
        """Decisions get their number when they are created or updated as final"""
        payload = data.model_dump(mode="json")
        payload["created_by"] = admin.id
        if data.status == "final":
            payload["decision_number"] = self.next_number("decision", data.decision_date.year).number
        try:
            result = self.supabase.table("dm_decisions").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create decision")
            return DecisionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_decision(self, decision_id: str, data: DecisionUpdate) -> DecisionResponse:
        try:
            current = self._get_decision_row(decision_id)
            update_data = data.model_dump(mode="json", exclude_none=True)
            if data.status == "final" and not current.get("decision_number"):
                decision_date = data.decision_date or current.get("decision_date")
                year = int(str(decision_date)[:4]) if decision_date else None
                update_data["decision_number"] = self.next_number("decision", year).number
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("dm_decisions")\
                .update(update_data)\
                .eq("id", decision_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Decision not found")
            return DecisionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Documents

    def _get_document_row(self, document_id: str) -> Dict[str, Any]:
        result = self.supabase.table("dm_documents")\
            .select("*")\
            .eq("id", document_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Document not found")
        return result.data[0]

    def list_documents(self, document_type: Optional[str] = None, status: Optional[str] = None) -> List[DocumentResponse]:
        try:
            query = self.supabase.table("dm_documents").select("*")
            if document_type:
                query = query.eq("type", document_type)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return [DocumentResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_document(self, document_id: str) -> DocumentResponse:
        try:
            return DocumentResponse(**self._get_document_row(document_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_document(self, data: DocumentCreate, admin: AdminUser) -> DocumentResponse:
        payload = data.model_dump(mode="json", exclude_none=True)
        payload["created_by"] = admin.id
        payload["document_number"] = self.next_number(data.type, data.reference_date.year).number
        try:
            result = self.supabase.table("dm_documents").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create document")
            return DocumentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_document(self, document_id: str, data: DocumentUpdate) -> DocumentResponse:
        try:
            update_data = data.model_dump(mode="json", exclude_none=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("dm_documents")\
                .update(update_data)\
                .eq("id", document_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Document not found")
            return DocumentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Attachments

    def _check_parent(self, parent_type: str, parent_id: str) -> None:
        if parent_type == "decision":
            self._get_decision_row(parent_id)
        else:
            self._get_document_row(parent_id)

    def list_attachments(self, parent_type: str, parent_id: str) -> List[AttachmentResponse]:
        try:
            self._check_parent(parent_type, parent_id)
            result = self.supabase.table("dm_attachments")\
                .select("*")\
                .eq("parent_id", parent_id)\
                .eq("parent_type", parent_type)\
                .order("created_at")\
                .execute()
            storage = get_storage(self.supabase, settings.official_documents_bucket)
            return [
                AttachmentResponse(**row, url=storage.get_public_url(row["file_path"]))
                for row in result.data or []
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upload_attachment(
        self,
        parent_type: str,
        parent_id: str,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        admin: AdminUser,
    ) -> AttachmentResponse:
        """Upload the file, then record it; the upload is removed if the record fails"""
        if not content:
            raise HTTPException(status_code=400, detail="File is empty")
        if len(content) > settings.max_document_size_mb * 1024 * 1024:
            raise HTTPException(status_code=400, detail=f"File must be smaller than {settings.max_document_size_mb}MB")
        self._check_parent(parent_type, parent_id)

        extension = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "bin"
        file_path = f"{parent_type}-{parent_id}-{int(time.time() * 1000)}.{extension}"
        storage = get_storage(self.supabase, settings.official_documents_bucket)
        try:
            storage.upload_file(content, file_path, content_type or "application/octet-stream")
        except Exception as e:
            logger.error(f"Attachment upload failed for {parent_type} {parent_id}: {e}")
            raise HTTPException(status_code=502, detail="File upload failed")

        try:
            result = self.supabase.table("dm_attachments").insert({
                "parent_id": parent_id,
                "parent_type": parent_type,
                "file_path": file_path,
                "file_name": filename or file_path,
                "file_type": content_type,
                "file_size": len(content),
                "uploaded_by": admin.id
            }).execute()
            if not result.data:
                raise RuntimeError("dm_attachments insert returned no row")
        except Exception as e:
            storage.delete_file(file_path)
            raise HTTPException(status_code=500, detail=str(e))
        return AttachmentResponse(**result.data[0], url=storage.get_public_url(file_path))

    # Templates

    def list_templates(self) -> List[TemplateResponse]:
        try:
            result = self.supabase.table("dm_templates")\
                .select("*")\
                .order("name")\
                .execute()
            return [TemplateResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_template(self, data: TemplateCreate, admin: AdminUser) -> TemplateResponse:
        try:
            payload = data.model_dump(mode="json", exclude_none=True)
            payload["created_by"] = admin.id
            result = self.supabase.table("dm_templates").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create template")
            return TemplateResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_template(self, template_id: str, data: TemplateUpdate) -> TemplateResponse:
        try:
            update_data = data.model_dump(mode="json", exclude_none=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("dm_templates")\
                .update(update_data)\
                .eq("id", template_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Template not found")
            return TemplateResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_template(self, template_id: str) -> bool:
        try:
            result = self.supabase.table("dm_templates")\
                .delete()\
                .eq("id", template_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Template not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
