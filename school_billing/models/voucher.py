# school_billing/models/voucher.py - per-student fee vouchers and their line items
from __future__ import annotations

from decimal import Decimal
from typing import Literal
from datetime import date, datetime

from sqlalchemy import (
    Integer, String, Numeric, Date, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_billing.models.base import Base, utcnow

VoucherStatus = Literal["pending", "partial", "paid"]


class Voucher(Base):
    __tablename__ = "fee_vouchers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE", name="fk_fee_vouchers_student_id"),
        index=True,
        nullable=False,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    # Only ever written through services.vouchers.apply_status
    status: Mapped[VoucherStatus] = mapped_column(String(16), nullable=False, default="pending")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    line_items: Mapped[list["VoucherLineItem"]] = relationship(
        "VoucherLineItem",
        back_populates="voucher",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="VoucherLineItem.id",
    )
    student = relationship("Student")

    __table_args__ = (
        UniqueConstraint("student_id", "due_date", name="uq_fee_vouchers_student_due_date"),
        CheckConstraint("status IN ('pending','partial','paid')", name="ck_fee_vouchers_status"),
        CheckConstraint("paid_amount >= 0", name="ck_fee_vouchers_paid_amount_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Voucher id={self.id} student={self.student_id} due={self.due_date} {self.status} paid={self.paid_amount}>"


class VoucherLineItem(Base):
    __tablename__ = "fee_voucher_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    voucher_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fee_vouchers.id", ondelete="CASCADE", name="fk_fee_voucher_details_voucher_id"),
        index=True,
        nullable=False,
    )
    fee_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fee_types.id", ondelete="RESTRICT", name="fk_fee_voucher_details_fee_type_id"),
        index=True,
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    voucher: Mapped["Voucher"] = relationship("Voucher", back_populates="line_items")
    fee_type = relationship("FeeType")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_fee_voucher_details_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<VoucherLineItem id={self.id} voucher={self.voucher_id} type={self.fee_type_id} amt={self.amount}>"
