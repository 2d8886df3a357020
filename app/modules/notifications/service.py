import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from app.config import settings
from app.modules.notifications.schemas import NotificationChannels, NotificationResult

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_MESSAGE = "New content has been published."


def valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and len(phone) >= 10


def valid_email(email: Optional[str]) -> bool:
    return bool(email) and "@" in email


def build_sms_text(title: str, message: Optional[str]) -> str:
    text = f"{title} - {message[:50] + '...' if message else DEFAULT_CONTENT_MESSAGE}"
    return text[:settings.sms_max_length]


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def enqueue_many(self, rows: List[Dict[str, Any]]) -> List[str]:
        """Insert queue rows and return their ids; errors propagate to the caller"""
        if not rows:
            return []
        result = self.supabase.table("notification_queue")\
            .insert([{"status": "pending", **row} for row in rows])\
            .execute()
        return [row["id"] for row in result.data or []]

    def remove(self, notification_ids: List[str]) -> None:
        """Drop queued notifications (used to undo an aborted workflow)"""
        if not notification_ids:
            return
        try:
            self.supabase.table("notification_queue")\
                .delete()\
                .in_("id", notification_ids)\
                .eq("status", "pending")\
                .execute()
        except Exception as e:
            logger.error(f"Failed to remove queued notifications {notification_ids}: {e}")

    def build_rows(
        self,
        recipients: List[Dict[str, Any]],
        channels: NotificationChannels,
        subject: str,
        message: str,
        sms_text: str,
        entity_type: str,
        entity_id: Optional[str],
        created_by: Optional[str],
    ) -> List[Dict[str, Any]]:
        base = {"entity_type": entity_type, "entity_id": entity_id, "created_by": created_by}
        rows = []
        seen = set()
        for recipient in recipients:
            member_id = recipient.get("id")
            if member_id in seen:
                continue
            seen.add(member_id)
            if channels.push and member_id:
                rows.append({**base, "channel": "push", "recipient": member_id, "subject": subject, "body": message})
            if channels.sms and valid_phone(recipient.get("phone")):
                rows.append({**base, "channel": "sms", "recipient": recipient["phone"], "subject": None, "body": sms_text})
            if channels.email and valid_email(recipient.get("email")):
                rows.append({**base, "channel": "email", "recipient": recipient["email"], "subject": subject, "body": message})
        return rows

    def send_content_notification(
        self,
        content_type: str,
        entity_id: str,
        channels: NotificationChannels,
        title: str,
        message: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> NotificationResult:
        """Fan a published item out to every active member on the selected channels"""
        if not channels.any:
            return NotificationResult()

        logger.info(f"Queueing notifications for {content_type} ({entity_id})")
        members_result = self.supabase.table("members")\
            .select("id, phone, email")\
            .eq("is_active", True)\
            .execute()
        members = members_result.data or []
        logger.info(f"Found {len(members)} active members for {content_type} notification")

        rows = self.build_rows(
            members, channels,
            subject=title,
            message=message or DEFAULT_CONTENT_MESSAGE,
            sms_text=build_sms_text(title, message),
            entity_type=content_type,
            entity_id=entity_id,
            created_by=created_by,
        )
        self.enqueue_many(rows)

        result = NotificationResult()
        for row in rows:
            setattr(result, row["channel"], getattr(result, row["channel"]) + 1)
        return result

    def notify_member(
        self,
        member: Dict[str, Any],
        channels: NotificationChannels,
        subject: str,
        message: str,
        created_by: Optional[str] = None,
    ) -> List[str]:
        """Queue a message to a single member; returns the queued row ids"""
        if not channels.any:
            return []
        rows = self.build_rows(
            [member], channels,
            subject=subject,
            message=message,
            sms_text=message[:settings.sms_max_length],
            entity_type="member",
            entity_id=member.get("id"),
            created_by=created_by,
        )
        return self.enqueue_many(rows)
