import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.modules.auth.schemas import AdminUser
from app.modules.finance.schemas import (
    AccountCreate, AccountResponse, CategoryResponse,
    TransactionCreate, TransactionResponse,
    FinanceOverview, CategoryTotal, FinanceSummaryResponse
)

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 90
SUMMARY_TRANSACTION_LIMIT = 300
RECENT_TRANSACTIONS = 10


def _split(value: Optional[str]) -> List[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def _in_or_eq(query, column: str, values: List[str]):
    if len(values) == 1:
        return query.eq(column, values[0])
    if values:
        return query.in_(column, values)
    return query


def summarize_transactions(
    transactions: List[Dict[str, Any]],
    categories: Dict[str, Dict[str, Any]],
) -> Dict[str, Any]:
    """Income, expense and transfer totals plus per-category totals"""
    totals = {"income": 0.0, "expense": 0.0, "transfer_in": 0.0, "transfer_out": 0.0}
    breakdown: Dict[str, CategoryTotal] = {}
    for tx in transactions:
        amount = float(tx.get("amount") or 0)
        kind = tx.get("transaction_type")
        if kind in ("income", "expense"):
            totals[kind] += amount
        elif kind == "transfer":
            if tx.get("account_id"):
                totals["transfer_out"] += amount
            if tx.get("transfer_account_id"):
                totals["transfer_in"] += amount

        category = categories.get(tx.get("category_id"))
        if category:
            key = f"{category.get('category_type')}_{category['id']}"
            if key not in breakdown:
                breakdown[key] = CategoryTotal(
                    category_id=category["id"],
                    category_name=category.get("name"),
                    category_type=category.get("category_type"),
                )
            breakdown[key].total_amount += amount
    return {"totals": totals, "breakdown": list(breakdown.values())}


class FinanceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_accounts(self, include_inactive: bool = False) -> List[AccountResponse]:
        try:
            query = self.supabase.table("finance_accounts").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("created_at").execute()
            return [AccountResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_account(self, data: AccountCreate) -> AccountResponse:
        try:
            payload = data.model_dump()
            payload["name"] = data.name.strip()
            payload["current_balance"] = data.opening_balance
            payload["is_active"] = True
            result = self.supabase.table("finance_accounts").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create account")
            return AccountResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_categories(self, category_type: Optional[str] = None, include_inactive: bool = False) -> List[CategoryResponse]:
        try:
            query = _in_or_eq(self.supabase.table("finance_categories").select("*"), "category_type", _split(category_type))
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("name").execute()
            return [CategoryResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_transactions(
        self,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        transaction_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        member_id: Optional[str] = None,
        limit: int = 200,
    ) -> List[TransactionResponse]:
        try:
            query = self.supabase.table("finance_transactions").select("*")
            if account_id:
                query = query.eq("account_id", account_id)
            if category_id:
                query = query.eq("category_id", category_id)
            query = _in_or_eq(query, "transaction_type", _split(transaction_type))
            if start_date:
                query = query.gte("transaction_date", start_date.isoformat())
            if end_date:
                query = query.lte("transaction_date", end_date.isoformat())
            if member_id:
                query = query.eq("member_id", member_id)
            result = query.order("transaction_date", desc=True)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [TransactionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_transaction(self, data: TransactionCreate, admin: AdminUser) -> TransactionResponse:
        payload = data.model_dump(mode="json")
        for field in ("reference_code", "description", "notes"):
            value = payload.get(field)
            payload[field] = value.strip() if value and value.strip() else None
        payload["created_by"] = admin.id
        try:
            result = self.supabase.table("finance_transactions").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record transaction")
            logger.info(f"{data.transaction_type} of {data.amount} recorded by {admin.id}")
            return TransactionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_summary(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_inactive_accounts: bool = False,
    ) -> FinanceSummaryResponse:
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=DEFAULT_LOOKBACK_DAYS)
        if start_date > end_date:
            raise HTTPException(status_code=400, detail="start_date must not be after end_date")
        try:
            accounts = self.list_accounts(include_inactive=include_inactive_accounts)
            account_summaries: Dict[str, Dict[str, Any]] = {}
            if accounts:
                try:
                    summary_result = self.supabase.table("finance_account_summary")\
                        .select("*")\
                        .in_("account_id", [a.id for a in accounts])\
                        .execute()
                    account_summaries = {row["account_id"]: row for row in summary_result.data or []}
                except Exception as e:
                    logger.error(f"Error loading finance account summaries: {e}")

            total_balance = 0.0
            for account in accounts:
                account.summary = account_summaries.get(account.id)
                balance = (account.summary or {}).get("current_balance")
                if balance is None:
                    balance = account.current_balance
                total_balance += float(balance or 0)

            tx_result = self.supabase.table("finance_transactions")\
                .select("*")\
                .gte("transaction_date", start_date.isoformat())\
                .lte("transaction_date", end_date.isoformat())\
                .order("transaction_date", desc=True)\
                .order("created_at", desc=True)\
                .limit(SUMMARY_TRANSACTION_LIMIT)\
                .execute()
            transactions = tx_result.data or []

            category_ids = list({tx["category_id"] for tx in transactions if tx.get("category_id")})
            categories: Dict[str, Dict[str, Any]] = {}
            if category_ids:
                cat_result = self.supabase.table("finance_categories")\
                    .select("id, name, category_type")\
                    .in_("id", category_ids)\
                    .execute()
                categories = {row["id"]: row for row in cat_result.data or []}

            summary = summarize_transactions(transactions, categories)
            totals = summary["totals"]
            return FinanceSummaryResponse(
                overview=FinanceOverview(
                    total_balance=total_balance,
                    total_income=totals["income"],
                    total_expense=totals["expense"],
                    total_incoming_transfer=totals["transfer_in"],
                    total_outgoing_transfer=totals["transfer_out"],
                ),
                accounts=accounts,
                recent_transactions=[TransactionResponse(**tx) for tx in transactions[:RECENT_TRANSACTIONS]],
                category_breakdown=summary["breakdown"],
                period_start=start_date,
                period_end=end_date,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
