import logging
from typing import Optional

from fastapi import HTTPException
from supabase import Client

from app.modules.auth.schemas import AdminUser
from app.modules.sticky_messages.schemas import StickyMessageCreate, StickyMessageResponse

logger = logging.getLogger(__name__)


class StickyMessageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current(self) -> Optional[StickyMessageResponse]:
        """Newest sticky message with its author's name, or None"""
        try:
            result = self.supabase.table("sticky_messages")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            row = result.data[0]
            creator_name = None
            if row.get("created_by"):
                creator = self.supabase.table("admin_users")\
                    .select("full_name")\
                    .eq("id", row["created_by"])\
                    .limit(1)\
                    .execute()
                if creator.data:
                    creator_name = creator.data[0].get("full_name")
            return StickyMessageResponse(**row, creator_name=creator_name)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def publish(self, data: StickyMessageCreate, admin: AdminUser) -> StickyMessageResponse:
        message = data.message.strip()
        if not message:
            raise HTTPException(status_code=400, detail="Message cannot be empty")
        try:
            result = self.supabase.table("sticky_messages").insert({
                "message": message,
                "created_by": admin.id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save sticky message")
            logger.info(f"Sticky message published by {admin.id}")
            return StickyMessageResponse(**result.data[0], creator_name=admin.full_name)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def clear(self, message_id: str) -> bool:
        try:
            result = self.supabase.table("sticky_messages")\
                .delete()\
                .eq("id", message_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Sticky message not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
