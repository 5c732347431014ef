# school_billing/utils/database_utils.py - transaction scoping and constraint translation
import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from school_billing.core.errors import BillingError, Conflict, InternalError, InvalidReference

logger = logging.getLogger(__name__)


class TransactionManager:
    """Context manager for one atomic unit of work on a session.

    Commits when the block exits cleanly. On any exception the transaction is
    rolled back and the exception propagates; storage errors that nobody
    translated are re-raised as InternalError.
    """

    def __init__(self, db: Session, description: str = "operation"):
        self.db = db
        self.description = description

    def __enter__(self):
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            try:
                self.db.commit()
            except IntegrityError as e:
                logger.warning("Commit rejected for %s: %s", self.description, e.orig)
                self.db.rollback()
                raise translate_integrity_error(e) from e
            except SQLAlchemyError as e:
                logger.error("Commit failed for %s: %s", self.description, e)
                self.db.rollback()
                raise InternalError(f"Failed to complete {self.description}", details={"cause": str(e)}) from e
            return False

        logger.info("Rolling back %s: %s", self.description, exc_val)
        try:
            self.db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error("Rollback failed for %s: %s", self.description, rollback_error)

        if isinstance(exc_val, IntegrityError):
            raise translate_integrity_error(exc_val) from exc_val
        if isinstance(exc_val, SQLAlchemyError):
            raise InternalError(f"Failed to complete {self.description}", details={"cause": str(exc_val)}) from exc_val
        return False


# constraint name -> (error class, message)
_CONSTRAINT_MESSAGES: Dict[str, tuple] = {
    "uq_fee_types_name": (Conflict, "Fee type name already exists"),
    "uq_fee_vouchers_student_due_date": (Conflict, "Voucher already exists for this student and due date"),
    "fk_fee_structures_class_id": (InvalidReference, "Invalid class_id: Class does not exist"),
    "fk_fee_structures_fee_type_id": (InvalidReference, "Invalid fee_type_id: Fee type does not exist"),
    "fk_fee_vouchers_student_id": (InvalidReference, "Invalid student_id: Student does not exist"),
    "fk_fee_voucher_details_voucher_id": (InvalidReference, "Invalid voucher_id: Voucher does not exist"),
    "fk_fee_voucher_details_fee_type_id": (InvalidReference, "Invalid fee_type_id: Fee type does not exist"),
}

# SQLite reports columns instead of constraint names
_SQLITE_UNIQUE_COLUMNS: Dict[str, str] = {
    "fee_types.name": "uq_fee_types_name",
    "fee_vouchers.student_id, fee_vouchers.due_date": "uq_fee_vouchers_student_due_date",
}


def _constraint_name(exc: IntegrityError) -> Optional[str]:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    text = str(exc.orig)
    for columns, constraint in _SQLITE_UNIQUE_COLUMNS.items():
        if columns in text:
            return constraint
    return None


def translate_integrity_error(exc: IntegrityError, default: Optional[BillingError] = None) -> BillingError:
    """Map a storage constraint violation onto the matching domain error"""
    name = _constraint_name(exc)
    if name in _CONSTRAINT_MESSAGES:
        error_cls, message = _CONSTRAINT_MESSAGES[name]
        return error_cls(message, details={"constraint": name})

    if default is not None:
        return default

    text = str(exc.orig).lower()
    if "unique" in text or "duplicate key" in text:
        return Conflict("Record conflicts with an existing one", details={"cause": str(exc.orig)})
    if "foreign key" in text:
        return InvalidReference("Referenced record does not exist or is still in use", details={"cause": str(exc.orig)})
    return InternalError("Database constraint violated", details={"cause": str(exc.orig)})
