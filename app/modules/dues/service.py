import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.core.scope import Scope, ScopedTable
from app.modules.dues.schemas import (
    DuePeriodCreate, DuePeriodResponse, DuePeriodDetailResponse, MemberDueResponse
)

logger = logging.getLogger(__name__)

MEMBER_COLUMNS = "id, first_name, last_name, membership_number, tc_identity, city, district, phone, email"


def _amount(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def compute_due_totals(row: Dict[str, Any], payments: List[Dict[str, Any]]) -> Dict[str, Any]:
    """total = amount - discount + penalty (never negative); outstanding = total - paid"""
    total_due = max(_amount(row.get("amount_due")) - _amount(row.get("discount_amount"))
                    + _amount(row.get("penalty_amount")), 0)
    outstanding = max(total_due - _amount(row.get("paid_amount")), 0)
    dated = [p for p in payments if p.get("payment_date")]
    last_payment = max(dated, key=lambda p: str(p["payment_date"])) if dated else None
    return {
        "total_due_amount": total_due,
        "outstanding_amount": outstanding,
        "last_payment_at": last_payment["payment_date"] if last_payment else None,
    }


class DuesService:
    def __init__(self, supabase: Client, scope: Scope):
        self.supabase = supabase
        self.scope = scope
        self.members = ScopedTable(supabase, "members", scope)

    def _summaries(self, period_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Summary rows keyed by period id; a failing view only drops the summaries"""
        if not period_ids:
            return {}
        try:
            result = self.supabase.table("member_due_period_summary")\
                .select("*")\
                .in_("period_id", period_ids)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading due period summaries: {e}")
            return {}
        return {row["period_id"]: row for row in result.data or []}

    def list_periods(self, status: Optional[str] = None) -> List[DuePeriodResponse]:
        try:
            query = self.supabase.table("member_due_periods").select("*")
            if status:
                statuses = [s.strip() for s in status.split(",") if s.strip()]
                if len(statuses) == 1:
                    query = query.eq("status", statuses[0])
                elif statuses:
                    query = query.in_("status", statuses)
            result = query.order("due_date", desc=True).execute()
            periods = result.data or []
            summaries = self._summaries([p["id"] for p in periods])
            return [DuePeriodResponse(**p, summary=summaries.get(p["id"])) for p in periods]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_period(self, data: DuePeriodCreate) -> DuePeriodResponse:
        if data.period_end < data.period_start:
            raise HTTPException(status_code=400, detail="Period end must not be before period start")
        payload = data.model_dump(mode="json", exclude={"auto_generate", "include_inactive_members"})
        try:
            result = self.supabase.table("member_due_periods").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create due period")
            period = result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        generated = 0
        if data.auto_generate:
            try:
                rpc_result = self.supabase.rpc("generate_member_dues_for_period", {
                    "p_period_id": period["id"],
                    "p_include_inactive": data.include_inactive_members
                }).execute()
                generated = int(rpc_result.data or 0)
            except Exception as e:
                logger.error(f"Error generating member dues for period {period['id']}: {e}")

        summary = self._summaries([period["id"]]).get(period["id"])
        return DuePeriodResponse(**period, summary=summary, generated_member_count=generated)

    def get_period(self, period_id: str) -> DuePeriodDetailResponse:
        """Period, its summary and the member dues of members in the admin's scope"""
        try:
            result = self.supabase.table("member_due_periods")\
                .select("*")\
                .eq("id", period_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Due period not found")
            period = result.data[0]
            summary = self._summaries([period_id]).get(period_id)

            dues_result = self.supabase.table("member_dues")\
                .select("*")\
                .eq("period_id", period_id)\
                .order("due_date")\
                .execute()
            dues = dues_result.data or []

            member_ids = list({d["member_id"] for d in dues})
            members: Dict[str, Dict[str, Any]] = {}
            if member_ids:
                members_result = self.members.select(MEMBER_COLUMNS).in_("id", member_ids).execute()
                members = {m["id"]: m for m in members_result.data or []}
            dues = [d for d in dues if d["member_id"] in members]

            payments: Dict[str, List[Dict[str, Any]]] = {}
            if dues:
                payments_result = self.supabase.table("member_due_payments")\
                    .select("*")\
                    .in_("member_due_id", [d["id"] for d in dues])\
                    .execute()
                for payment in payments_result.data or []:
                    payments.setdefault(payment["member_due_id"], []).append(payment)

            member_dues = []
            for due in dues:
                due_payments = payments.get(due["id"], [])
                member_dues.append(MemberDueResponse(
                    **due,
                    member=members.get(due["member_id"]),
                    payments=due_payments,
                    **compute_due_totals(due, due_payments)
                ))
            return DuePeriodDetailResponse(
                period=DuePeriodResponse(**period),
                summary=summary,
                member_dues=member_dues
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_status(self, period_id: str, status: str) -> DuePeriodResponse:
        update_data: Dict[str, Any] = {"status": status}
        if status == "collecting":
            update_data["published_at"] = datetime.utcnow().isoformat()
            update_data["closed_at"] = None
        elif status == "closed":
            update_data["closed_at"] = datetime.utcnow().isoformat()
        try:
            result = self.supabase.table("member_due_periods")\
                .update(update_data)\
                .eq("id", period_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Due period not found")
            return DuePeriodResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
