"""Best-effort audit trail written to the audit_logs table."""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from supabase import Client

from app.core.permissions import _field

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = {"LOGIN", "LOGOUT", "CREATE", "UPDATE", "DELETE", "VIEW", "EXPORT", "IMPORT"}
AUDIT_ENTITIES = {
    "AUTH", "MEMBER", "SETTINGS", "SMS", "FINANCE", "USER", "SYSTEM",
    "ANNOUNCEMENT", "NEWS", "SLIDER", "DISCOUNT", "STICKY_MESSAGE",
    "DEFINITION", "ROLE", "DOCUMENT", "DECISION", "DUES", "UNKNOWN",
}


def get_client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


class AuditLogger:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log(
        self,
        admin: Any,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        """Insert an audit row. Failures are logged and never raised."""
        user_id = _field(admin, "id")
        if not user_id:
            logger.warning("Audit log attempted without authenticated admin: %s %s", action, entity_type)
            return False
        payload = {
            **(details or {}),
            "user_email": _field(admin, "email"),
            "user_name": _field(admin, "full_name"),
        }
        try:
            self.supabase.table("audit_logs").insert({
                "user_id": user_id,
                "action": action,
                "entity_type": entity_type if entity_type in AUDIT_ENTITIES else "UNKNOWN",
                "entity_id": entity_id,
                "details": payload,
                "ip_address": ip_address,
            }).execute()
            return True
        except Exception as e:
            logger.error(f"Error writing audit log ({action} {entity_type}): {e}")
            return False
