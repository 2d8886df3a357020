from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime, date

PeriodStatus = Literal["draft", "collecting", "closed"]


class DuePeriodCreate(BaseModel):
    name: str = Field(..., min_length=1)
    period_start: date
    period_end: date
    due_date: date
    due_amount: float = Field(..., ge=0)
    penalty_rate: float = Field(0, ge=0)
    description: Optional[str] = None
    auto_generate: bool = False
    include_inactive_members: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Period name is required")
        return v


class DuePeriodStatusUpdate(BaseModel):
    status: PeriodStatus


class DuePeriodResponse(BaseModel):
    id: str
    name: str
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    due_date: Optional[date] = None
    due_amount: float = 0
    penalty_rate: float = 0
    description: Optional[str] = None
    status: Optional[str] = None
    published_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    summary: Optional[Dict[str, Any]] = None
    generated_member_count: Optional[int] = None

    class Config:
        from_attributes = True


class MemberDueResponse(BaseModel):
    id: str
    member_id: str
    period_id: str
    due_date: Optional[date] = None
    amount_due: float = 0
    discount_amount: float = 0
    penalty_amount: float = 0
    paid_amount: float = 0
    status: Optional[str] = None
    notes: Optional[str] = None
    member: Optional[Dict[str, Any]] = None
    payments: List[Dict[str, Any]] = []
    total_due_amount: float = 0
    outstanding_amount: float = 0
    last_payment_at: Optional[date] = None

    class Config:
        from_attributes = True


class DuePeriodDetailResponse(BaseModel):
    period: DuePeriodResponse
    summary: Optional[Dict[str, Any]] = None
    member_dues: List[MemberDueResponse]
