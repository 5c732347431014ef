# school_billing/services/generation.py
"""
Monthly voucher generation for a whole cohort.

For one academic year and month this creates a voucher plus line items for
every student whose class has monthly fee structures, skipping students that
already hold a voucher for that month. The batch is one transaction, so a
failure part way through leaves no voucher behind without its line items.
Re-running the same period creates nothing new.
"""

import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from school_billing.core.errors import NotFound
from school_billing.models.fee import FeeStructure
from school_billing.models.school import Student
from school_billing.models.voucher import Voucher, VoucherLineItem
from school_billing.services.dataclasses import GeneratedVoucher, GenerationResult
from school_billing.services.directory import ClassDirectory, StudentDirectory
from school_billing.services.fee_catalog import FeeStructureCatalog
from school_billing.services.vouchers import apply_status
from school_billing.utils.database_utils import TransactionManager
from school_billing.utils.validators import parse_academic_year, validate_id, validate_month

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month"""
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def period_for(academic_year: Any, month: Any) -> Tuple[str, int, date, date]:
    """Validate a (academic year, month) pair and return its date range.

    The calendar year is the first half of the academic year label, so
    "2024-2025" month 3 is March 2024.
    """
    first_year, _ = parse_academic_year(academic_year)
    month = validate_month(month)
    start, end = month_bounds(first_year, month)
    return academic_year, month, start, end


class FeeGenerationService:
    def __init__(self, db: Session):
        self.db = db
        self.students = StudentDirectory(db)
        self.classes = ClassDirectory(db)
        self.structures = FeeStructureCatalog(db)

    def generate_monthly(self, academic_year: str, month: int, class_id: Optional[int] = None) -> GenerationResult:
        # Input is checked before any database work
        academic_year, month, period_start, due_date = period_for(academic_year, month)
        if class_id is not None:
            class_id = validate_id(class_id, "class_id")

        created: List[GeneratedVoucher] = []
        skipped_no_structure = 0
        skipped_existing = 0

        with TransactionManager(self.db, "generate monthly vouchers"):
            if class_id is not None and not self.classes.class_exists(class_id):
                raise NotFound("Class not found", details={"class_id": class_id})
            students = self._eligible_students(class_id)
            if not students:
                raise NotFound("No students found", details={"class_id": class_id})

            already_billed = self._students_billed_between(period_start, due_date)
            structures_by_class: Dict[int, List[FeeStructure]] = {}

            for student in students:
                if student.class_id is None:
                    skipped_no_structure += 1
                    continue
                if student.class_id not in structures_by_class:
                    structures_by_class[student.class_id] = self.structures.structures_for(
                        student.class_id, academic_year, "monthly"
                    )
                structures = structures_by_class[student.class_id]
                if not structures:
                    skipped_no_structure += 1
                    continue

                if student.id in already_billed:
                    skipped_existing += 1
                    continue

                created.append(self._create_voucher(student, due_date, structures))
                already_billed.add(student.id)

        message = "Monthly fee vouchers generated successfully"
        logger.info(
            "Generated %d vouchers for %s month %d (class %s); skipped %d without monthly fees, %d already billed",
            len(created), academic_year, month, class_id if class_id is not None else "all",
            skipped_no_structure, skipped_existing,
        )
        return GenerationResult(
            academic_year=academic_year,
            month=month,
            due_date=due_date,
            vouchers=created,
            message=message,
        )

    def _eligible_students(self, class_id: Optional[int]) -> List[Student]:
        if class_id is None:
            return self.students.get_all_students()
        return self.students.get_students_by_class(class_id)

    def _students_billed_between(self, start: date, end: date) -> Set[int]:
        return set(
            self.db.execute(
                select(Voucher.student_id).where(Voucher.due_date >= start, Voucher.due_date <= end)
            ).scalars().all()
        )

    def _create_voucher(self, student: Student, due_date: date, structures: List[FeeStructure]) -> GeneratedVoucher:
        voucher = Voucher(student_id=student.id, due_date=due_date, paid_amount=Decimal("0.00"))
        self.db.add(voucher)
        self.db.flush()

        total = Decimal("0.00")
        for structure in structures:
            self.db.add(VoucherLineItem(
                voucher_id=voucher.id,
                fee_type_id=structure.fee_type_id,
                amount=structure.amount,
            ))
            total += structure.amount

        apply_status(voucher, total)
        self.db.flush()

        return GeneratedVoucher(
            voucher_id=voucher.id,
            student_id=student.id,
            student_name=student.display_name,
            due_date=voucher.due_date,
            total_amount=total,
        )
