from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime, date

AccountType = Literal["cash", "bank", "other"]
TransactionType = Literal["income", "expense", "transfer"]


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1)
    account_type: AccountType
    currency: str = "TRY"
    opening_balance: float = 0
    description: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        v = (v or "").strip()
        return v.upper() if len(v) == 3 else "TRY"


class AccountResponse(BaseModel):
    id: str
    name: str
    account_type: str
    currency: str = "TRY"
    opening_balance: float = 0
    current_balance: Optional[float] = None
    description: Optional[str] = None
    is_active: bool = True
    summary: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    id: str
    name: str
    category_type: str
    is_active: bool = True

    class Config:
        from_attributes = True


class TransactionCreate(BaseModel):
    account_id: str
    category_id: str
    transaction_type: TransactionType
    amount: float = Field(..., gt=0)
    transaction_date: date
    reference_code: Optional[str] = None
    description: Optional[str] = None
    member_id: Optional[str] = None
    member_due_id: Optional[str] = None
    transfer_account_id: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_transfer(self):
        if self.transaction_type == "transfer":
            if not self.transfer_account_id:
                raise ValueError("Transfers require a target account")
            if self.transfer_account_id == self.account_id:
                raise ValueError("Transfer source and target accounts must differ")
        return self


class TransactionResponse(BaseModel):
    id: str
    account_id: str
    category_id: Optional[str] = None
    transaction_type: str
    amount: float
    transaction_date: date
    reference_code: Optional[str] = None
    description: Optional[str] = None
    member_id: Optional[str] = None
    member_due_id: Optional[str] = None
    transfer_account_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FinanceOverview(BaseModel):
    total_balance: float = 0
    total_income: float = 0
    total_expense: float = 0
    total_incoming_transfer: float = 0
    total_outgoing_transfer: float = 0


class CategoryTotal(BaseModel):
    category_id: str
    category_name: Optional[str] = None
    category_type: Optional[str] = None
    total_amount: float = 0


class FinanceSummaryResponse(BaseModel):
    overview: FinanceOverview
    accounts: List[AccountResponse]
    recent_transactions: List[TransactionResponse]
    category_breakdown: List[CategoryTotal]
    period_start: date
    period_end: date
