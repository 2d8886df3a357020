from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime, date

MembershipStatus = Literal["pending", "active", "inactive", "resigned"]
DocumentType = Literal["resignation_petition", "personnel_file", "other"]


class MemberCreate(BaseModel):
    first_name: str
    last_name: str
    tc_identity: Optional[str] = None
    membership_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    district: Optional[str] = None
    workplace: Optional[str] = None
    position: Optional[str] = None
    address: Optional[str] = None


class MemberUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tc_identity: Optional[str] = None
    membership_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    district: Optional[str] = None
    workplace: Optional[str] = None
    position: Optional[str] = None
    address: Optional[str] = None
    membership_status: Optional[Literal["pending", "active", "inactive"]] = None


class MemberResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    tc_identity: Optional[str] = None
    membership_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    district: Optional[str] = None
    workplace: Optional[str] = None
    position: Optional[str] = None
    membership_status: Optional[str] = None
    is_active: bool = False
    resignation_reason_id: Optional[str] = None
    resignation_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberListResponse(BaseModel):
    data: List[MemberResponse]
    count: int


class MemberDocumentResponse(BaseModel):
    id: str
    member_id: str
    document_type: str
    file_name: str
    file_path: Optional[str] = None
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResignationRequest(BaseModel):
    reason_code: str
    effective_date: date
    confirm_name: str
    notify_sms: bool = False
    notify_email: bool = False


class ResignationResponse(BaseModel):
    member: MemberResponse
    document: MemberDocumentResponse
    notifications_queued: int
