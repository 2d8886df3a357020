from datetime import date
from fastapi import APIRouter, Depends, Query, Request
from supabase import Client
from typing import List, Optional

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import require_capability, get_audit_logger
from app.core.permissions import PermissionManager
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AdminUser
from app.modules.finance.schemas import (
    AccountCreate, AccountResponse, CategoryResponse,
    TransactionCreate, TransactionResponse, FinanceSummaryResponse
)
from app.modules.finance.service import FinanceService

router = APIRouter(prefix="/finance", tags=["finance"])

can_view_finance = require_capability(PermissionManager.can_view_finance)
can_manage_finance = require_capability(PermissionManager.can_manage_finance)


def get_finance_service(supabase: Client = Depends(get_supabase)) -> FinanceService:
    return FinanceService(supabase)


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    include_inactive: bool = False,
    admin: AdminUser = Depends(can_view_finance),
    service: FinanceService = Depends(get_finance_service)
):
    return service.list_accounts(include_inactive)


@router.post("/accounts", response_model=AccountResponse, status_code=201)
async def create_account(
    body: AccountCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_finance),
    service: FinanceService = Depends(get_finance_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    created = service.create_account(body)
    audit.log(admin, "CREATE", "FINANCE", created.id, {"account": created.name},
              ip_address=get_client_ip(request))
    return created


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    category_type: Optional[str] = Query(None, alias="type"),
    include_inactive: bool = False,
    admin: AdminUser = Depends(can_view_finance),
    service: FinanceService = Depends(get_finance_service)
):
    return service.list_categories(category_type, include_inactive)


@router.get("/transactions", response_model=List[TransactionResponse])
async def list_transactions(
    account_id: Optional[str] = None,
    category_id: Optional[str] = None,
    transaction_type: Optional[str] = Query(None, alias="type"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    member_id: Optional[str] = None,
    limit: int = Query(200, ge=1, le=1000),
    admin: AdminUser = Depends(can_view_finance),
    service: FinanceService = Depends(get_finance_service)
):
    """Transactions, newest first; type accepts a comma separated list"""
    return service.list_transactions(
        account_id=account_id, category_id=category_id, transaction_type=transaction_type,
        start_date=start_date, end_date=end_date, member_id=member_id, limit=limit
    )


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    body: TransactionCreate,
    request: Request,
    admin: AdminUser = Depends(can_manage_finance),
    service: FinanceService = Depends(get_finance_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    created = service.create_transaction(body, admin)
    audit.log(admin, "CREATE", "FINANCE", created.id, {
        "type": created.transaction_type,
        "amount": created.amount,
        "account_id": created.account_id
    }, ip_address=get_client_ip(request))
    return created


@router.get("/summary", response_model=FinanceSummaryResponse)
async def get_finance_summary(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_inactive_accounts: bool = False,
    admin: AdminUser = Depends(can_view_finance),
    service: FinanceService = Depends(get_finance_service)
):
    """Balances and totals over a date range (last 90 days by default)"""
    return service.get_summary(start_date, end_date, include_inactive_accounts)
