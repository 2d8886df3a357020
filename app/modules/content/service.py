import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type

from fastapi import HTTPException
from pydantic import BaseModel
from supabase import Client

from app.config import settings
from app.core.permissions import PermissionManager
from app.database.storage import get_storage
from app.modules.auth.schemas import AdminUser
from app.modules.content.schemas import (
    NewsCreate, NewsUpdate, NewsResponse,
    AnnouncementCreate, AnnouncementUpdate, AnnouncementResponse,
    SliderCreate, SliderUpdate, SliderResponse,
    DiscountCreate, DiscountUpdate, DiscountResponse,
    ImageUploadResponse
)
from app.modules.notifications.service import NotificationService

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}


class ContentKind:
    """Describes one publishable content table and who may manage it"""

    def __init__(
        self,
        name: str,
        table: str,
        audit_entity: str,
        capability: Callable[[Any], bool],
        visible_column: str,
        order_column: str,
        create_schema: Type[BaseModel],
        update_schema: Type[BaseModel],
        response_schema: Type[BaseModel],
        order_desc: bool = True,
        notifiable: bool = False,
    ):
        self.name = name
        self.table = table
        self.audit_entity = audit_entity
        self.capability = capability
        self.visible_column = visible_column
        self.order_column = order_column
        self.order_desc = order_desc
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.response_schema = response_schema
        self.notifiable = notifiable


NEWS = ContentKind(
    "news", "news", "NEWS", PermissionManager.can_manage_news,
    visible_column="is_published", order_column="created_at",
    create_schema=NewsCreate, update_schema=NewsUpdate, response_schema=NewsResponse,
)
ANNOUNCEMENTS = ContentKind(
    "announcements", "announcements", "ANNOUNCEMENT", PermissionManager.can_manage_announcements,
    visible_column="is_active", order_column="created_at",
    create_schema=AnnouncementCreate, update_schema=AnnouncementUpdate, response_schema=AnnouncementResponse,
    notifiable=True,
)
SLIDERS = ContentKind(
    "sliders", "sliders", "SLIDER", PermissionManager.can_manage_sliders,
    visible_column="is_active", order_column="sort_order", order_desc=False,
    create_schema=SliderCreate, update_schema=SliderUpdate, response_schema=SliderResponse,
)
DISCOUNTS = ContentKind(
    "discounts", "discounts", "DISCOUNT", PermissionManager.can_manage_discounts,
    visible_column="is_active", order_column="created_at",
    create_schema=DiscountCreate, update_schema=DiscountUpdate, response_schema=DiscountResponse,
    notifiable=True,
)

CONTENT_KINDS = [NEWS, ANNOUNCEMENTS, SLIDERS, DISCOUNTS]


def validate_image_file(content: bytes, content_type: Optional[str]) -> None:
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")
    if content_type not in IMAGE_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only JPEG, PNG, GIF and WebP images are supported")
    if len(content) > settings.max_image_size_mb * 1024 * 1024:
        raise HTTPException(status_code=400, detail=f"Image must be smaller than {settings.max_image_size_mb}MB")


class ContentService:
    def __init__(self, supabase: Client, kind: ContentKind):
        self.supabase = supabase
        self.kind = kind

    def _get_row(self, item_id: str) -> Dict[str, Any]:
        result = self.supabase.table(self.kind.table)\
            .select("*")\
            .eq("id", item_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail=f"{self.kind.name.capitalize()} item not found")
        return result.data[0]

    def _list(self, limit: int, offset: int, visible_only: bool) -> List[Dict[str, Any]]:
        query = self.supabase.table(self.kind.table).select("*")
        if visible_only:
            query = query.eq(self.kind.visible_column, True)
        result = query.order(self.kind.order_column, desc=self.kind.order_desc)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        return result.data or []

    def list_items(self, limit: int = 50, offset: int = 0):
        try:
            return [self.kind.response_schema(**row) for row in self._list(limit, offset, visible_only=False)]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_public(self, limit: int = 50, offset: int = 0):
        """Published (news) or active items only"""
        try:
            return [self.kind.response_schema(**row) for row in self._list(limit, offset, visible_only=True)]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_item(self, item_id: str):
        try:
            return self.kind.response_schema(**self._get_row(item_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_item(self, data: BaseModel, admin: AdminUser):
        payload = data.model_dump(exclude_none=True, exclude={"notify"})
        channels = getattr(data, "notify", None)
        if self.kind.visible_column == "is_published" and payload.get("is_published"):
            payload["published_at"] = datetime.utcnow().isoformat()

        try:
            result = self.supabase.table(self.kind.table).insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail=f"Failed to create {self.kind.name} item")
            row = result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        response = self.kind.response_schema(**row)
        if self.kind.notifiable and channels is not None and channels.any:
            # Fan-out failures do not undo the publication
            try:
                response.notifications = NotificationService(self.supabase).send_content_notification(
                    self.kind.name, row["id"], channels,
                    title=row.get("title", ""),
                    message=row.get("content") or row.get("description"),
                    created_by=admin.id,
                )
            except Exception as e:
                logger.error(f"Notification fan-out failed for {self.kind.name} {row['id']}: {e}")
        return response

    def update_item(self, item_id: str, data: BaseModel):
        try:
            current = self._get_row(item_id)
            update_data = data.model_dump(exclude_none=True)
            if self.kind.visible_column == "is_published" and update_data.get("is_published") \
                    and not current.get("published_at"):
                update_data["published_at"] = datetime.utcnow().isoformat()
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table(self.kind.table)\
                .update(update_data)\
                .eq("id", item_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail=f"{self.kind.name.capitalize()} item not found")
            return self.kind.response_schema(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_item(self, item_id: str) -> bool:
        try:
            self._get_row(item_id)
            self.supabase.table(self.kind.table).delete().eq("id", item_id).execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upload_image(self, item_id: str, content: bytes, filename: Optional[str], content_type: Optional[str]) -> ImageUploadResponse:
        """Store the image under {kind}/{id}-{timestamp}.{ext} and point image_url at it"""
        validate_image_file(content, content_type)
        self._get_row(item_id)

        extension = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "jpg"
        key = f"{self.kind.name}/{item_id}-{int(time.time() * 1000)}.{extension}"
        storage = get_storage(self.supabase, settings.images_bucket)
        try:
            storage.upload_file(content, key, content_type)
        except Exception as e:
            logger.error(f"Image upload failed for {self.kind.name} {item_id}: {e}")
            raise HTTPException(status_code=502, detail="Image upload failed")

        image_url = storage.get_public_url(key)
        try:
            self.supabase.table(self.kind.table)\
                .update({"image_url": image_url, "updated_at": datetime.utcnow().isoformat()})\
                .eq("id", item_id)\
                .execute()
        except Exception as e:
            storage.delete_file(key)
            raise HTTPException(status_code=500, detail=str(e))
        return ImageUploadResponse(id=item_id, image_url=image_url)
