from decimal import Decimal

import pytest

from school_billing.core.errors import NotFound, OverpaymentError, ValidationError
from school_billing.services.generation import FeeGenerationService
from school_billing.services.payments import PaymentService
from school_billing.services.vouchers import VoucherLedger


@pytest.fixture
def march_voucher(db, monthly_setup):
    """Voucher for Alice: tuition 5000 + library 200"""
    result = FeeGenerationService(db).generate_monthly("2024-2025", 3, monthly_setup["class_id"])
    return result.vouchers[0].voucher_id


def test_full_payment_settles_voucher(db, march_voucher):
    summary = PaymentService(db).apply_payment(march_voucher, "5200.00")
    assert summary.paid_amount == Decimal("5200.00")
    assert summary.status == "paid"
    assert summary.balance == Decimal("0.00")


def test_nothing_more_can_be_paid_on_a_settled_voucher(db, march_voucher):
    payments = PaymentService(db)
    payments.apply_payment(march_voucher, "5200.00")
    with pytest.raises(OverpaymentError):
        payments.apply_payment(march_voucher, "1.00")
    assert VoucherLedger(db).get_voucher(march_voucher).paid_amount == Decimal("5200.00")


def test_payments_accumulate(db, march_voucher):
    payments = PaymentService(db)
    first = payments.apply_payment(march_voucher, "2000")
    assert first.status == "partial"

    second = payments.apply_payment(march_voucher, 1000)
    assert second.paid_amount == Decimal("3000.00")
    assert second.status == "partial"
    assert second.balance == Decimal("2200.00")


def test_overpayment_leaves_paid_amount_untouched(db, seed):
    klass = seed.school_class("Grade 9")
    student = seed.student(klass.id, "Esther")
    fee = seed.fee_type("exam")
    ledger = VoucherLedger(db)
    voucher = ledger.create_voucher(student.id, "2024-06-30")
    ledger.add_line_item(voucher.id, fee.id, "500.00")

    payments = PaymentService(db)
    payments.apply_payment(voucher.id, "400.00")
    with pytest.raises(OverpaymentError) as exc:
        payments.apply_payment(voucher.id, "150.00")

    assert exc.value.message == "Payment exceeds total amount of 500.00"
    assert exc.value.details["outstanding"] == "100.00"
    detail = ledger.get_voucher(voucher.id)
    assert detail.paid_amount == Decimal("400.00")
    assert detail.status == "partial"


def test_voucher_without_lines_cannot_take_payment(db, seed):
    klass = seed.school_class("Grade 9")
    student = seed.student(klass.id, "Esther")
    voucher = VoucherLedger(db).create_voucher(student.id, "2024-06-30")

    with pytest.raises(OverpaymentError):
        PaymentService(db).apply_payment(voucher.id, "0.01")


def test_unknown_voucher(db):
    with pytest.raises(NotFound):
        PaymentService(db).apply_payment(12345, "10.00")


@pytest.mark.parametrize("amount", ["0", "-100", "abc", None, "1.001", "1e30", "10000000000.00"])
def test_invalid_amounts_rejected(db, march_voucher, amount):
    with pytest.raises(ValidationError):
        PaymentService(db).apply_payment(march_voucher, amount)
    assert VoucherLedger(db).get_voucher(march_voucher).status == "pending"
