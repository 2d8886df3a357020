from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from app.modules.audit_logs.schemas import AuditLogResponse

MAX_LOGS = 100


class AuditLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_logs(self, action: Optional[str] = None, entity: Optional[str] = None, limit: int = MAX_LOGS) -> List[AuditLogResponse]:
        """Newest entries first, with the acting admin's name and email"""
        try:
            query = self.supabase.table("audit_logs").select("*")
            if action:
                query = query.eq("action", action)
            if entity:
                query = query.eq("entity_type", entity)
            result = query.order("created_at", desc=True).limit(min(limit, MAX_LOGS)).execute()
            rows = result.data or []

            user_ids = list({row["user_id"] for row in rows if row.get("user_id")})
            admins = {}
            if user_ids:
                admins_result = self.supabase.table("admin_users")\
                    .select("id, full_name, email")\
                    .in_("id", user_ids)\
                    .execute()
                admins = {a["id"]: a for a in admins_result.data or []}

            return [
                AuditLogResponse(
                    **row,
                    user_full_name=admins.get(row.get("user_id"), {}).get("full_name"),
                    user_email=admins.get(row.get("user_id"), {}).get("email"),
                )
                for row in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
