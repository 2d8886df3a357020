from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime, date

BoardType = Literal["management", "audit", "discipline"]
DecisionStatus = Literal["draft", "final", "cancelled", "revised"]
DocumentType = Literal["incoming", "outgoing", "internal"]
DocumentStatus = Literal["registered", "draft", "pending_approval", "sent", "archived", "cancelled"]
SequenceType = Literal["decision", "incoming", "outgoing", "internal"]
TextAlign = Literal["left", "center", "right", "justify"]


class DecisionCreate(BaseModel):
    decision_date: date
    meeting_number: Optional[str] = None
    board_type: BoardType = "management"
    title: str = Field(..., min_length=1)
    content: str = ""
    status: DecisionStatus = "draft"
    tags: List[str] = []


class DecisionUpdate(BaseModel):
    decision_date: Optional[date] = None
    meeting_number: Optional[str] = None
    board_type: Optional[BoardType] = None
    title: Optional[str] = None
    content: Optional[str] = None
    status: Optional[DecisionStatus] = None
    tags: Optional[List[str]] = None


class DecisionResponse(BaseModel):
    id: str
    decision_number: Optional[str] = None
    decision_date: Optional[date] = None
    meeting_number: Optional[str] = None
    board_type: str
    title: str
    content: Optional[str] = None
    status: str
    tags: List[str] = []
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentCreate(BaseModel):
    type: DocumentType
    reference_date: date
    subject: str = Field(..., min_length=1)
    sender: Optional[str] = None
    receiver: Optional[str] = None
    description: Optional[str] = None
    category_code: Optional[str] = None
    status: DocumentStatus = "registered"
    related_document_id: Optional[str] = None
    assigned_to: Optional[str] = None
    header_title: Optional[str] = None
    sender_unit: Optional[str] = None
    text_align: Optional[TextAlign] = None
    signers: Optional[List[Dict[str, Any]]] = None


class DocumentUpdate(BaseModel):
    reference_date: Optional[date] = None
    subject: Optional[str] = None
    sender: Optional[str] = None
    receiver: Optional[str] = None
    description: Optional[str] = None
    category_code: Optional[str] = None
    status: Optional[DocumentStatus] = None
    related_document_id: Optional[str] = None
    assigned_to: Optional[str] = None
    header_title: Optional[str] = None
    sender_unit: Optional[str] = None
    text_align: Optional[TextAlign] = None
    signers: Optional[List[Dict[str, Any]]] = None


class DocumentResponse(BaseModel):
    id: str
    type: str
    document_number: Optional[str] = None
    reference_date: Optional[date] = None
    subject: str
    sender: Optional[str] = None
    receiver: Optional[str] = None
    description: Optional[str] = None
    category_code: Optional[str] = None
    status: str
    related_document_id: Optional[str] = None
    assigned_to: Optional[str] = None
    header_title: Optional[str] = None
    sender_unit: Optional[str] = None
    text_align: Optional[str] = None
    signers: Optional[List[Dict[str, Any]]] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttachmentResponse(BaseModel):
    id: str
    parent_id: str
    parent_type: str
    file_path: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    url: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SequenceRequest(BaseModel):
    type: SequenceType
    year: Optional[int] = Field(None, ge=2000, le=2100)


class SequenceResponse(BaseModel):
    type: str
    year: int
    number: str


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category_code: Optional[str] = None
    subject: Optional[str] = None
    receiver: Optional[str] = None
    content: Optional[str] = None
    sender_unit: Optional[str] = None
    text_align: Optional[TextAlign] = None
    signers: Optional[List[Dict[str, Any]]] = None
    is_public: bool = False


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category_code: Optional[str] = None
    subject: Optional[str] = None
    receiver: Optional[str] = None
    content: Optional[str] = None
    sender_unit: Optional[str] = None
    text_align: Optional[TextAlign] = None
    signers: Optional[List[Dict[str, Any]]] = None
    is_public: Optional[bool] = None


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category_code: Optional[str] = None
    subject: Optional[str] = None
    receiver: Optional[str] = None
    content: Optional[str] = None
    sender_unit: Optional[str] = None
    text_align: Optional[str] = None
    signers: Optional[List[Dict[str, Any]]] = None
    is_public: bool = False
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
