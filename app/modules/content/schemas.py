from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

from app.modules.notifications.schemas import NotificationChannels, NotificationResult


class NewsCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    is_published: bool = False


class NewsUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    is_published: Optional[bool] = None


class NewsResponse(BaseModel):
    id: str
    title: str
    content: Optional[str] = None
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    is_published: bool = False
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str
    type: Literal["general", "urgent"] = "general"
    is_active: bool = True
    notify: Optional[NotificationChannels] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    type: Optional[Literal["general", "urgent"]] = None
    is_active: Optional[bool] = None


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: Optional[str] = None
    type: str = "general"
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    notifications: Optional[NotificationResult] = None

    class Config:
        from_attributes = True


class SliderCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    button_text: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class SliderUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    button_text: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class SliderResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    button_text: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DiscountCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    discount_amount: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    notify: Optional[NotificationChannels] = None


class DiscountUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    discount_amount: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class DiscountResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    discount_amount: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website_url: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    notifications: Optional[NotificationResult] = None

    class Config:
        from_attributes = True


class ImageUploadResponse(BaseModel):
    id: str
    image_url: str
