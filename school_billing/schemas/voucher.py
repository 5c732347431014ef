# school_billing/schemas/voucher.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from school_billing.schemas.common import Pagination


class VoucherCreate(BaseModel):
    student_id: int
    due_date: date


class PaymentIn(BaseModel):
    amount: Decimal = Field(..., description="Amount received, must be positive")


class LineItemCreate(BaseModel):
    voucher_id: int
    fee_type_id: int
    amount: Decimal


class LineItemUpdate(BaseModel):
    voucher_id: Optional[int] = None
    fee_type_id: Optional[int] = None
    amount: Optional[Decimal] = None


class LineItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    voucher_id: int
    fee_type_id: int
    amount: Decimal
    created_at: datetime


class VoucherOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    due_date: date
    paid_amount: Decimal
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VoucherSummaryOut(VoucherOut):
    total: Decimal
    balance: Decimal


class VoucherLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fee_type_id: int
    fee_type: str
    amount: Decimal


class VoucherDetailOut(VoucherSummaryOut):
    student_name: str
    class_id: Optional[int] = None
    line_items: List[VoucherLineOut] = Field(default_factory=list)


class VoucherPageOut(BaseModel):
    data: List[VoucherSummaryOut]
    pagination: Pagination
    message: str


class GenerateMonthlyIn(BaseModel):
    class_id: Optional[int] = None
    academic_year: str = Field(..., description="YYYY-YYYY")
    month: int = Field(..., description="1-12")


class GeneratedVoucherOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    voucher_id: int
    student_id: int
    student_name: str
    due_date: date
    total_amount: Decimal
