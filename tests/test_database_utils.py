import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from school_billing.core.errors import Conflict, InternalError, InvalidReference, NotFound
from school_billing.models import FeeType
from school_billing.utils.database_utils import TransactionManager, translate_integrity_error


class PostgresUniqueViolation(Exception):
    """Driver error shaped like psycopg2's, with the constraint name on .diag"""

    def __init__(self, constraint_name):
        super().__init__(f'duplicate key value violates unique constraint "{constraint_name}"')
        self.diag = type("Diag", (), {"constraint_name": constraint_name})()


def integrity_error(orig):
    return IntegrityError("INSERT ...", {}, orig)


class TestTranslateIntegrityError:
    def test_sqlite_unique_violation_on_voucher(self):
        error = translate_integrity_error(integrity_error(sqlite3.IntegrityError(
            "UNIQUE constraint failed: fee_vouchers.student_id, fee_vouchers.due_date"
        )))
        assert isinstance(error, Conflict)
        assert error.details == {"constraint": "uq_fee_vouchers_student_due_date"}

    def test_sqlite_unique_violation_on_fee_type_name(self):
        error = translate_integrity_error(integrity_error(sqlite3.IntegrityError(
            "UNIQUE constraint failed: fee_types.name"
        )))
        assert isinstance(error, Conflict)
        assert error.message == "Fee type name already exists"

    def test_sqlite_foreign_key_violation(self):
        error = translate_integrity_error(integrity_error(sqlite3.IntegrityError("FOREIGN KEY constraint failed")))
        assert isinstance(error, InvalidReference)

    def test_named_postgres_constraint(self):
        error = translate_integrity_error(integrity_error(PostgresUniqueViolation("fk_fee_structures_class_id")))
        assert isinstance(error, InvalidReference)
        assert error.message == "Invalid class_id: Class does not exist"

    def test_unknown_unique_violation(self):
        error = translate_integrity_error(integrity_error(PostgresUniqueViolation("uq_something_else")))
        assert isinstance(error, Conflict)

    def test_default_is_used_for_unknown_constraints(self):
        fallback = NotFound("gone")
        error = translate_integrity_error(integrity_error(sqlite3.IntegrityError("CHECK constraint failed")), fallback)
        assert error is fallback

    def test_other_violations_are_internal(self):
        error = translate_integrity_error(integrity_error(sqlite3.IntegrityError("CHECK constraint failed")))
        assert isinstance(error, InternalError)


class TestTransactionManager:
    def test_commits_on_success(self, db):
        with TransactionManager(db, "add fee type"):
            db.add(FeeType(name="tuition"))
        db.rollback()
        assert db.query(FeeType).count() == 1

    def test_integrity_error_is_translated_and_rolled_back(self, db):
        db.add(FeeType(name="tuition"))
        db.commit()

        with pytest.raises(Conflict):
            with TransactionManager(db, "add fee type"):
                db.add(FeeType(name="library"))
                db.add(FeeType(name="tuition"))
                db.flush()
        assert [row.name for row in db.query(FeeType).all()] == ["tuition"]

    def test_other_storage_errors_become_internal(self, db):
        with pytest.raises(InternalError):
            with TransactionManager(db, "broken query"):
                raise OperationalError("SELECT 1", {}, sqlite3.OperationalError("database is locked"))

    def test_domain_errors_propagate_unchanged(self, db):
        with pytest.raises(NotFound):
            with TransactionManager(db, "lookup"):
                db.add(FeeType(name="transport"))
                db.flush()
                raise NotFound("Fee type not found")
        assert db.query(FeeType).count() == 0
