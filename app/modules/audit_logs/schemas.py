from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any
from datetime import datetime

from app.core.audit import AUDIT_ACTIONS


class AuditLogCreate(BaseModel):
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: str) -> str:
        v = v.upper()
        if v not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown action: {v}")
        return v

    @field_validator("entity_type")
    @classmethod
    def upper_entity(cls, v: str) -> str:
        return v.upper()


class AuditLogCreated(BaseModel):
    success: bool


class AuditLogResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    user_full_name: Optional[str] = None
    user_email: Optional[str] = None

    class Config:
        from_attributes = True
