from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class StickyMessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class StickyMessageResponse(BaseModel):
    id: str
    message: str
    created_by: Optional[str] = None
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
