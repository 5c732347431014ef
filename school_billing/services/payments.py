# school_billing/services/payments.py
import logging
from typing import Any

from sqlalchemy.orm import Session

from school_billing.core.errors import NotFound, OverpaymentError
from school_billing.services.dataclasses import VoucherSummary, summarize_voucher
from school_billing.services.vouchers import lock_voucher, refresh_status, voucher_total
from school_billing.utils.database_utils import TransactionManager
from school_billing.utils.validators import parse_amount, to_decimal

logger = logging.getLogger(__name__)


class PaymentService:
    """Applies payments to vouchers; the only writer of paid_amount"""

    def __init__(self, db: Session):
        self.db = db

    def apply_payment(self, voucher_id: int, amount: Any) -> VoucherSummary:
        amount = parse_amount(amount)

        with TransactionManager(self.db, "apply payment"):
            # Row lock serialises concurrent payments on the same voucher
            voucher = lock_voucher(self.db, voucher_id)
            if voucher is None:
                raise NotFound("Voucher not found", details={"voucher_id": voucher_id})

            total = voucher_total(self.db, voucher.id)
            paid = to_decimal(voucher.paid_amount)
            new_paid = paid + amount

            if new_paid > total:
                logger.warning(
                    "Rejected payment of %s on voucher %s: paid %s of %s", amount, voucher_id, paid, total
                )
                raise OverpaymentError(
                    f"Payment exceeds total amount of {total}",
                    details={
                        "voucher_id": voucher_id,
                        "total": str(total),
                        "paid_amount": str(paid),
                        "amount": str(amount),
                        "outstanding": str(total - paid),
                    },
                )

            voucher.paid_amount = new_paid
            total = refresh_status(self.db, voucher)
            summary = summarize_voucher(voucher, total)

        logger.info(
            "Applied payment of %s to voucher %s: paid %s of %s (%s)",
            amount, voucher_id, summary.paid_amount, summary.total, summary.status,
        )
        return summary
