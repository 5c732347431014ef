# school_billing/services/dataclasses.py
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from school_billing.models.voucher import Voucher


@dataclass
class LineItemView:
    """One fee-type charge as shown on a voucher"""
    id: int
    fee_type_id: int
    fee_type: str
    amount: Decimal


@dataclass
class VoucherSummary:
    """Voucher row with its computed total, as listed per student"""
    id: int
    student_id: int
    due_date: date
    paid_amount: Decimal
    status: str
    total: Decimal
    balance: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class VoucherDetail:
    """Voucher joined with its student and priced line items"""
    id: int
    student_id: int
    student_name: str
    class_id: Optional[int]
    due_date: date
    paid_amount: Decimal
    status: str
    total: Decimal
    balance: Decimal
    line_items: List[LineItemView] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class VoucherPage:
    items: List[VoucherSummary]
    page: int
    limit: int
    total: int


@dataclass
class GeneratedVoucher:
    voucher_id: int
    student_id: int
    student_name: str
    due_date: date
    total_amount: Decimal


@dataclass
class GenerationResult:
    academic_year: str
    month: int
    due_date: date
    vouchers: List[GeneratedVoucher]
    message: str


def summarize_voucher(voucher: Voucher, total: Decimal) -> VoucherSummary:
    paid = voucher.paid_amount if voucher.paid_amount is not None else Decimal("0.00")
    return VoucherSummary(
        id=voucher.id,
        student_id=voucher.student_id,
        due_date=voucher.due_date,
        paid_amount=paid,
        status=voucher.status,
        total=total,
        balance=total - paid,
        created_at=voucher.created_at,
        updated_at=voucher.updated_at,
    )


def detail_voucher(voucher: Voucher) -> VoucherDetail:
    """Build the read projection from a voucher with student and line items loaded"""
    lines = [
        LineItemView(
            id=item.id,
            fee_type_id=item.fee_type_id,
            fee_type=item.fee_type.name if item.fee_type is not None else "",
            amount=item.amount,
        )
        for item in voucher.line_items
    ]
    total = sum((line.amount for line in lines), Decimal("0.00"))
    paid = voucher.paid_amount if voucher.paid_amount is not None else Decimal("0.00")
    student = voucher.student
    return VoucherDetail(
        id=voucher.id,
        student_id=voucher.student_id,
        student_name=student.display_name if student is not None else "",
        class_id=student.class_id if student is not None else None,
        due_date=voucher.due_date,
        paid_amount=paid,
        status=voucher.status,
        total=total,
        balance=total - paid,
        line_items=lines,
        created_at=voucher.created_at,
        updated_at=voucher.updated_at,
    )
