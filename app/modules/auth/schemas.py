from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict


class AdminUser(BaseModel):
    """Request-scoped identity of the authenticated admin."""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    role_type: Optional[str] = None
    role_id: Optional[str] = None
    city: Optional[str] = None
    region: Optional[int] = None
    phone: Optional[str] = None
    is_active: bool = True
    permissions: List[str] = []

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AdminUser


class PasswordChangeRequest(BaseModel):
    new_password: str = Field(min_length=8)


class MeResponse(AdminUser):
    effective_permissions: List[str]
    menu: List[Dict[str, str]]
