# school_billing/services/statements.py
import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from school_billing.core.errors import NotFound
from school_billing.models.school import Student
from school_billing.models.voucher import Voucher, VoucherLineItem
from school_billing.services.dataclasses import VoucherDetail, detail_voucher
from school_billing.services.generation import period_for
from school_billing.services.vouchers import VoucherLedger
from school_billing.utils.validators import validate_id

logger = logging.getLogger(__name__)


class StatementService:
    """Read-only voucher projections for statement documents"""

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return (
            select(Voucher)
            .join(Student, Student.id == Voucher.student_id)
            .options(
                joinedload(Voucher.student),
                selectinload(Voucher.line_items).joinedload(VoucherLineItem.fee_type),
            )
        )

    def voucher_statement(self, voucher_id: int) -> VoucherDetail:
        return VoucherLedger(self.db).get_voucher(voucher_id)

    def period_statements(self, academic_year: Any, month: Any, class_id: Optional[int] = None) -> List[VoucherDetail]:
        academic_year, month, start, end = period_for(academic_year, month)
        query = self._base_query().where(Voucher.due_date >= start, Voucher.due_date <= end)
        if class_id is not None:
            query = query.where(Student.class_id == validate_id(class_id, "class_id"))
        query = query.order_by(Student.class_id, Student.first_name, Student.last_name, Voucher.id)

        vouchers = self.db.execute(query).unique().scalars().all()
        if not vouchers:
            raise NotFound(
                "No vouchers found for the specified criteria",
                details={"academic_year": academic_year, "month": month, "class_id": class_id},
            )
        logger.info("Prepared %d voucher statements for %s month %d", len(vouchers), academic_year, month)
        return [detail_voucher(voucher) for voucher in vouchers]
