# school_billing/services/vouchers.py
"""
Voucher ledger: one voucher per student and due date, priced by its line items.

A voucher's status is never chosen by a caller. Every path that changes
paid_amount or the set of line items ends in apply_status/refresh_status,
which run derive_status over the current total and paid amount.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import select, func, exists
from sqlalchemy.orm import Session, joinedload, selectinload

from school_billing.core.config import settings
from school_billing.core.errors import Conflict, InvalidReference, NotFound, ValidationError
from school_billing.models.base import utcnow
from school_billing.models.voucher import Voucher, VoucherLineItem
from school_billing.services.dataclasses import (
    VoucherDetail, VoucherPage, detail_voucher, summarize_voucher
)
from school_billing.services.directory import StudentDirectory
from school_billing.services.fee_catalog import FeeTypeCatalog
from school_billing.utils.database_utils import TransactionManager
from school_billing.utils.validators import CENT, parse_amount, to_decimal, validate_due_date, validate_id

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def derive_status(total: Decimal, paid: Decimal) -> str:
    """pending -> partial -> paid, as a pure function of the two amounts"""
    if total > 0 and paid >= total:
        return "paid"
    if paid > 0:
        return "partial"
    return "pending"


def voucher_total(db: Session, voucher_id: int) -> Decimal:
    """Sum of the voucher's line item amounts"""
    total = db.execute(
        select(func.coalesce(func.sum(VoucherLineItem.amount), 0)).where(
            VoucherLineItem.voucher_id == voucher_id
        )
    ).scalar()
    return to_decimal(total).quantize(CENT)


def apply_status(voucher: Voucher, total: Decimal) -> str:
    voucher.status = derive_status(total, to_decimal(voucher.paid_amount))
    voucher.updated_at = utcnow()
    return voucher.status


def refresh_status(db: Session, voucher: Voucher) -> Decimal:
    """Recompute and store the status of a voucher from what is in the database.

    Pending writes are flushed first so the total reflects this transaction.
    Returns the total used.
    """
    db.flush()
    total = voucher_total(db, voucher.id)
    apply_status(voucher, total)
    db.flush()
    return total


def lock_voucher(db: Session, voucher_id: int) -> Optional[Voucher]:
    """SELECT ... FOR UPDATE on one voucher, refreshing any cached copy"""
    return db.execute(
        select(Voucher)
        .where(Voucher.id == voucher_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


class VoucherLedger:
    def __init__(self, db: Session):
        self.db = db
        self.students = StudentDirectory(db)
        self.fee_types = FeeTypeCatalog(db)

    # ------------------------------------------------------------------
    # Vouchers
    # ------------------------------------------------------------------

    def create_voucher(self, student_id: int, due_date: Any) -> Voucher:
        student_id = validate_id(student_id, "student_id")
        due_date = validate_due_date(due_date)

        with TransactionManager(self.db, "create voucher"):
            if self.students.get_student(student_id) is None:
                raise InvalidReference(
                    "Invalid student_id: Student does not exist", details={"student_id": student_id}
                )
            if self._voucher_exists(student_id, due_date):
                logger.warning("Duplicate voucher for student %s due %s", student_id, due_date)
                raise Conflict(
                    "Voucher already exists for this student and due date",
                    details={"student_id": student_id, "due_date": due_date.isoformat()},
                )
            voucher = Voucher(student_id=student_id, due_date=due_date, paid_amount=ZERO)
            self.db.add(voucher)
            apply_status(voucher, ZERO)
            self.db.flush()

        logger.info("Created voucher %s for student %s due %s", voucher.id, student_id, due_date)
        return voucher

    def get_voucher(self, voucher_id: int) -> VoucherDetail:
        voucher = self.db.execute(
            select(Voucher)
            .where(Voucher.id == voucher_id)
            .options(
                joinedload(Voucher.student),
                selectinload(Voucher.line_items).joinedload(VoucherLineItem.fee_type),
            )
        ).scalar_one_or_none()
        if voucher is None:
            raise NotFound("Voucher not found", details={"voucher_id": voucher_id})
        return detail_voucher(voucher)

    def list_vouchers(self, student_id: int, page: int = 1, limit: Optional[int] = None) -> VoucherPage:
        limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
        if page < 1:
            raise ValidationError("page must be 1 or greater", details={"field": "page", "value": page})
        if limit < 1 or limit > settings.MAX_PAGE_SIZE:
            raise ValidationError(
                f"limit must be between 1 and {settings.MAX_PAGE_SIZE}",
                details={"field": "limit", "value": limit},
            )

        totals = (
            select(
                VoucherLineItem.voucher_id.label("voucher_id"),
                func.sum(VoucherLineItem.amount).label("total"),
            )
            .group_by(VoucherLineItem.voucher_id)
            .subquery()
        )
        rows = self.db.execute(
            select(Voucher, func.coalesce(totals.c.total, 0))
            .outerjoin(totals, totals.c.voucher_id == Voucher.id)
            .where(Voucher.student_id == student_id)
            .order_by(Voucher.due_date.desc(), Voucher.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).all()

        count = self.db.execute(
            select(func.count(Voucher.id)).where(Voucher.student_id == student_id)
        ).scalar() or 0

        return VoucherPage(
            items=[summarize_voucher(voucher, to_decimal(total)) for voucher, total in rows],
            page=page,
            limit=limit,
            total=int(count),
        )

    def delete_voucher(self, voucher_id: int) -> None:
        with TransactionManager(self.db, "delete voucher"):
            voucher = self.db.get(Voucher, voucher_id)
            if voucher is None:
                raise NotFound("Voucher not found", details={"voucher_id": voucher_id})
            self.db.delete(voucher)
            self.db.flush()
        logger.info("Deleted voucher %s and its line items", voucher_id)

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    def list_line_items(self, voucher_id: Optional[int] = None) -> List[VoucherLineItem]:
        query = select(VoucherLineItem).order_by(VoucherLineItem.id)
        if voucher_id is not None:
            query = query.where(VoucherLineItem.voucher_id == voucher_id)
        return list(self.db.execute(query).scalars().all())

    def get_line_item(self, item_id: int) -> VoucherLineItem:
        item = self.db.get(VoucherLineItem, item_id)
        if item is None:
            raise NotFound("Fee voucher detail not found", details={"detail_id": item_id})
        return item

    def add_line_item(self, voucher_id: int, fee_type_id: int, amount: Any) -> VoucherLineItem:
        voucher_id = validate_id(voucher_id, "voucher_id")
        fee_type_id = validate_id(fee_type_id, "fee_type_id")
        amount = parse_amount(amount)

        with TransactionManager(self.db, "add voucher line item"):
            voucher = self._lock_referenced_voucher(voucher_id)
            self._check_fee_type(fee_type_id)
            item = VoucherLineItem(voucher_id=voucher.id, fee_type_id=fee_type_id, amount=amount)
            self.db.add(item)
            refresh_status(self.db, voucher)

        logger.info("Added line item %s to voucher %s (%s)", item.id, voucher_id, amount)
        return item

    def update_line_item(
        self,
        item_id: int,
        voucher_id: Optional[int] = None,
        fee_type_id: Optional[int] = None,
        amount: Any = None,
    ) -> VoucherLineItem:
        if voucher_id is None and fee_type_id is None and amount is None:
            raise ValidationError("Request body is empty")
        if voucher_id is not None:
            voucher_id = validate_id(voucher_id, "voucher_id")
        if fee_type_id is not None:
            fee_type_id = validate_id(fee_type_id, "fee_type_id")
        if amount is not None:
            amount = parse_amount(amount)

        with TransactionManager(self.db, "update voucher line item"):
            item = self.get_line_item(item_id)
            previous_voucher_id = item.voucher_id
            target_voucher_id = voucher_id if voucher_id is not None else previous_voucher_id

            # Lock in id order so two movers cannot deadlock each other
            locked = {}
            for vid in sorted({previous_voucher_id, target_voucher_id}):
                locked[vid] = (
                    self._lock_referenced_voucher(vid) if vid == target_voucher_id
                    else lock_voucher(self.db, vid)
                )

            if fee_type_id is not None:
                self._check_fee_type(fee_type_id)
                item.fee_type_id = fee_type_id
            if amount is not None:
                item.amount = amount
            item.voucher_id = target_voucher_id

            for voucher in locked.values():
                if voucher is not None:
                    refresh_status(self.db, voucher)

        logger.info("Updated line item %s on voucher %s", item_id, target_voucher_id)
        return item

    def delete_line_item(self, item_id: int) -> None:
        with TransactionManager(self.db, "delete voucher line item"):
            item = self.get_line_item(item_id)
            voucher = lock_voucher(self.db, item.voucher_id)
            self.db.delete(item)
            refresh_status(self.db, voucher)
        logger.info("Deleted line item %s", item_id)

    # ------------------------------------------------------------------

    def _voucher_exists(self, student_id: int, due_date: date) -> bool:
        return bool(
            self.db.execute(
                select(exists().where(Voucher.student_id == student_id, Voucher.due_date == due_date))
            ).scalar()
        )

    def _lock_referenced_voucher(self, voucher_id: int) -> Voucher:
        voucher = lock_voucher(self.db, voucher_id)
        if voucher is None:
            raise InvalidReference(
                "Invalid voucher_id: Voucher does not exist", details={"voucher_id": voucher_id}
            )
        return voucher

    def _check_fee_type(self, fee_type_id: int) -> None:
        if not self.fee_types.exists(fee_type_id):
            raise InvalidReference(
                "Invalid fee_type_id: Fee type does not exist", details={"fee_type_id": fee_type_id}
            )
