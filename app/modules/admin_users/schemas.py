from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime

AdminRole = Literal["admin", "super_admin", "branch_manager"]
RoleType = Literal["general_manager", "regional_manager", "branch_manager"]


class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str
    role: AdminRole = "admin"
    role_type: Optional[RoleType] = None
    role_id: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    phone: Optional[str] = None


class AdminUserUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[AdminRole] = None
    role_type: Optional[RoleType] = None
    role_id: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    phone: Optional[str] = None


class AdminUserActiveUpdate(BaseModel):
    is_active: bool


class AdminUserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    role_type: Optional[str] = None
    role_id: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    phone: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
