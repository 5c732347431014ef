# school_billing/models/fee.py - fee categories and per-class recurring obligations
from __future__ import annotations

from decimal import Decimal
from typing import Literal
from datetime import datetime

from sqlalchemy import (
    String, Integer, Numeric, ForeignKey, DateTime,
    CheckConstraint, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_billing.models.base import Base, utcnow

# String "enums" keep migrations simple
Frequency = Literal["monthly", "annual", "one-time"]
FREQUENCIES = ("monthly", "annual", "one-time")


class FeeType(Base):
    __tablename__ = "fee_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    structures: Mapped[list["FeeStructure"]] = relationship(
        "FeeStructure",
        back_populates="fee_type",
        passive_deletes="all",
    )

    __table_args__ = (
        Index("uq_fee_types_name", "name", unique=True),
        CheckConstraint("length(name) > 0", name="ck_fee_types_name_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<FeeType id={self.id} name={self.name}>"


class FeeStructure(Base):
    __tablename__ = "fee_structures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    class_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("classes.id", ondelete="CASCADE", name="fk_fee_structures_class_id"),
        index=True,
        nullable=False,
    )
    fee_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("fee_types.id", ondelete="RESTRICT", name="fk_fee_structures_fee_type_id"),
        index=True,
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    frequency: Mapped[Frequency] = mapped_column(String(16), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    fee_type: Mapped["FeeType"] = relationship("FeeType", back_populates="structures")

    __table_args__ = (
        CheckConstraint("frequency IN ('monthly','annual','one-time')", name="ck_fee_structures_frequency"),
        CheckConstraint("amount > 0", name="ck_fee_structures_amount_positive"),
        # No uniqueness on (class, fee type, year, frequency): several charges
        # of one fee type may coexist and each becomes its own voucher line.
        Index("ix_fee_structures_class_year_frequency", "class_id", "academic_year", "frequency"),
    )

    def __repr__(self) -> str:
        return (
            f"<FeeStructure id={self.id} class={self.class_id} type={self.fee_type_id} "
            f"{self.frequency} {self.academic_year} amt={self.amount}>"
        )
