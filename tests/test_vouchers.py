from datetime import date
from decimal import Decimal

import pytest

from school_billing.core.errors import Conflict, InvalidReference, NotFound, ValidationError
from school_billing.models import Voucher, VoucherLineItem
from school_billing.services.payments import PaymentService
from school_billing.services.vouchers import VoucherLedger


@pytest.fixture
def student(seed):
    klass = seed.school_class("Grade 2")
    return seed.student(klass.id, "Daniel", "Kiprop")


@pytest.fixture
def tuition(seed):
    return seed.fee_type("tuition")


class TestVoucherLifecycle:
    def test_create_starts_pending_and_unpaid(self, db, student):
        voucher = VoucherLedger(db).create_voucher(student.id, "2024-04-30")
        assert voucher.status == "pending"
        assert voucher.paid_amount == Decimal("0.00")
        assert voucher.due_date == date(2024, 4, 30)

    def test_duplicate_due_date_conflicts(self, db, student):
        ledger = VoucherLedger(db)
        ledger.create_voucher(student.id, "2024-04-30")
        with pytest.raises(Conflict):
            ledger.create_voucher(student.id, date(2024, 4, 30))
        assert db.query(Voucher).count() == 1

    def test_unknown_student(self, db):
        with pytest.raises(InvalidReference):
            VoucherLedger(db).create_voucher(4040, "2024-04-30")

    def test_bad_due_date(self, db, student):
        with pytest.raises(ValidationError):
            VoucherLedger(db).create_voucher(student.id, "30-04-2024")

    def test_get_missing(self, db):
        with pytest.raises(NotFound):
            VoucherLedger(db).get_voucher(999)

    def test_get_includes_student_and_lines(self, db, student, tuition, seed):
        library = seed.fee_type("library")
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        ledger.add_line_item(voucher.id, tuition.id, "5000.00")
        ledger.add_line_item(voucher.id, library.id, "200.00")

        detail = ledger.get_voucher(voucher.id)
        assert detail.student_name == "Daniel Kiprop"
        assert detail.class_id == student.class_id
        assert [line.fee_type for line in detail.line_items] == ["tuition", "library"]
        assert detail.total == Decimal("5200.00")
        assert detail.balance == Decimal("5200.00")

    def test_delete_removes_line_items(self, db, student, tuition):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        ledger.add_line_item(voucher.id, tuition.id, "100.00")

        ledger.delete_voucher(voucher.id)
        assert db.query(Voucher).count() == 0
        assert db.query(VoucherLineItem).count() == 0
        with pytest.raises(NotFound):
            ledger.delete_voucher(voucher.id)


class TestListing:
    def test_newest_due_date_first_with_totals(self, db, student, tuition):
        ledger = VoucherLedger(db)
        for month in (1, 3, 2):
            voucher = ledger.create_voucher(student.id, date(2024, month, 28))
            ledger.add_line_item(voucher.id, tuition.id, f"{month}00.00")

        page = ledger.list_vouchers(student.id)
        assert page.total == 3
        assert [v.due_date.month for v in page.items] == [3, 2, 1]
        assert [v.total for v in page.items] == [Decimal("300.00"), Decimal("200.00"), Decimal("100.00")]

    def test_pagination(self, db, student):
        ledger = VoucherLedger(db)
        for month in range(1, 6):
            ledger.create_voucher(student.id, date(2024, month, 1))

        second = ledger.list_vouchers(student.id, page=2, limit=2)
        assert second.total == 5
        assert [v.due_date.month for v in second.items] == [3, 2]
        assert ledger.list_vouchers(student.id, page=4, limit=2).items == []

    def test_voucher_without_lines_totals_zero(self, db, student):
        ledger = VoucherLedger(db)
        ledger.create_voucher(student.id, "2024-01-31")
        [summary] = ledger.list_vouchers(student.id).items
        assert summary.total == Decimal("0.00")
        assert summary.status == "pending"

    @pytest.mark.parametrize("page, limit", [(0, 10), (1, 0), (1, 10_000)])
    def test_invalid_paging(self, db, student, page, limit):
        with pytest.raises(ValidationError):
            VoucherLedger(db).list_vouchers(student.id, page=page, limit=limit)


class TestLineItems:
    def test_add_to_missing_voucher(self, db, tuition):
        with pytest.raises(InvalidReference):
            VoucherLedger(db).add_line_item(999, tuition.id, "10.00")

    def test_add_with_missing_fee_type(self, db, student):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        with pytest.raises(InvalidReference):
            ledger.add_line_item(voucher.id, 999, "10.00")
        assert db.query(VoucherLineItem).count() == 0

    def test_non_positive_amount(self, db, student, tuition):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        with pytest.raises(ValidationError):
            ledger.add_line_item(voucher.id, tuition.id, "0")

    def test_adding_a_line_to_a_paid_voucher_makes_it_partial(self, db, student, tuition):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        ledger.add_line_item(voucher.id, tuition.id, "500.00")
        PaymentService(db).apply_payment(voucher.id, "500.00")
        assert ledger.get_voucher(voucher.id).status == "paid"

        ledger.add_line_item(voucher.id, tuition.id, "100.00")
        detail = ledger.get_voucher(voucher.id)
        assert detail.status == "partial"
        assert detail.balance == Decimal("100.00")

    def test_deleting_the_unpaid_line_settles_the_voucher(self, db, student, tuition):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        ledger.add_line_item(voucher.id, tuition.id, "500.00")
        extra = ledger.add_line_item(voucher.id, tuition.id, "100.00")
        PaymentService(db).apply_payment(voucher.id, "500.00")
        assert ledger.get_voucher(voucher.id).status == "partial"

        ledger.delete_line_item(extra.id)
        assert ledger.get_voucher(voucher.id).status == "paid"
        with pytest.raises(NotFound):
            ledger.get_line_item(extra.id)

    def test_update_amount_rederives_status(self, db, student, tuition):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        item = ledger.add_line_item(voucher.id, tuition.id, "500.00")
        PaymentService(db).apply_payment(voucher.id, "300.00")

        ledger.update_line_item(item.id, amount="300.00")
        assert ledger.get_voucher(voucher.id).status == "paid"

        # shrinking below what was paid is allowed; the voucher stays settled
        ledger.update_line_item(item.id, amount="250.00")
        detail = ledger.get_voucher(voucher.id)
        assert detail.status == "paid"
        assert detail.balance == Decimal("-50.00")

    def test_moving_a_line_rederives_both_vouchers(self, db, student, tuition):
        ledger = VoucherLedger(db)
        april = ledger.create_voucher(student.id, "2024-04-30")
        may = ledger.create_voucher(student.id, "2024-05-31")
        ledger.add_line_item(april.id, tuition.id, "400.00")
        moving = ledger.add_line_item(april.id, tuition.id, "100.00")
        PaymentService(db).apply_payment(april.id, "400.00")
        assert ledger.get_voucher(april.id).status == "partial"

        item = ledger.update_line_item(moving.id, voucher_id=may.id)
        assert item.voucher_id == may.id
        assert ledger.get_voucher(april.id).status == "paid"
        assert ledger.get_voucher(may.id).total == Decimal("100.00")
        assert ledger.get_voucher(may.id).status == "pending"

    def test_update_to_missing_voucher_leaves_item_alone(self, db, student, tuition):
        ledger = VoucherLedger(db)
        voucher = ledger.create_voucher(student.id, "2024-04-30")
        item = ledger.add_line_item(voucher.id, tuition.id, "100.00")

        with pytest.raises(InvalidReference):
            ledger.update_line_item(item.id, voucher_id=999, amount="200.00")
        unchanged = ledger.get_line_item(item.id)
        assert unchanged.voucher_id == voucher.id
        assert unchanged.amount == Decimal("100.00")

    def test_empty_update(self, db):
        with pytest.raises(ValidationError):
            VoucherLedger(db).update_line_item(1)

    def test_update_missing_item(self, db):
        with pytest.raises(NotFound):
            VoucherLedger(db).update_line_item(999, amount="10.00")

    def test_list_line_items_filtered_by_voucher(self, db, student, tuition):
        ledger = VoucherLedger(db)
        april = ledger.create_voucher(student.id, "2024-04-30")
        may = ledger.create_voucher(student.id, "2024-05-31")
        ledger.add_line_item(april.id, tuition.id, "100.00")
        ledger.add_line_item(may.id, tuition.id, "200.00")
        ledger.add_line_item(april.id, tuition.id, "300.00")

        assert [item.amount for item in ledger.list_line_items()] == [
            Decimal("100.00"), Decimal("200.00"), Decimal("300.00"),
        ]
        assert [item.amount for item in ledger.list_line_items(april.id)] == [Decimal("100.00"), Decimal("300.00")]
