from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

RoleType = Literal["general_manager", "regional_manager", "branch_manager"]


class PermissionResponse(BaseModel):
    id: str
    key: str
    name: str
    group_name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PermissionGroupResponse(BaseModel):
    group_name: str
    permissions: List[PermissionResponse]


class RoleCreate(BaseModel):
    name: str
    description: Optional[str] = None
    role_type: RoleType = "general_manager"
    permission_ids: List[str] = []


class RoleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    role_type: Optional[RoleType] = None


class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    role_type: Optional[str] = None
    is_system_role: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleWithPermissionsResponse(RoleResponse):
    permissions: List[PermissionResponse]


class RolePermissionsUpdate(BaseModel):
    permission_ids: List[str]


class RolePermissionsUpdateResponse(BaseModel):
    role_id: str
    assigned_count: int
    permission_ids: List[str]
    message: str
