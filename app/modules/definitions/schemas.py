from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

DefinitionType = Literal["workplace", "position", "title", "resignation_reason"]


class DefinitionCreate(BaseModel):
    definition_type: DefinitionType
    name: str = Field(..., min_length=1, max_length=200)
    sort_order: int = 0
    is_active: bool = True


class DefinitionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class DefinitionResponse(BaseModel):
    id: str
    definition_type: str
    name: str
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
