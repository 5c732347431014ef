# school_billing/services/fee_catalog.py
"""
Fee types and fee structures.

Fee types are named categories (tuition, sports, ...). Fee structures say how
much a class owes for a fee type in an academic year and how often. Editing a
structure never reaches back into vouchers that were already generated.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, exists
from sqlalchemy.orm import Session

from school_billing.core.errors import Conflict, InvalidReference, NotFound, ValidationError
from school_billing.models.fee import FeeStructure, FeeType
from school_billing.models.voucher import VoucherLineItem
from school_billing.services.directory import ClassDirectory
from school_billing.utils.database_utils import TransactionManager
from school_billing.utils.validators import (
    parse_academic_year, parse_amount, validate_frequency, validate_id
)

logger = logging.getLogger(__name__)


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required", details={"field": "name"})
    return name.strip()


class FeeTypeCatalog:
    """Named fee categories referenced by structures and voucher lines"""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[FeeType]:
        return list(
            self.db.execute(
                select(FeeType).order_by(FeeType.created_at.desc(), FeeType.id.desc())
            ).scalars().all()
        )

    def get(self, fee_type_id: int) -> FeeType:
        fee_type = self.db.get(FeeType, fee_type_id)
        if fee_type is None:
            raise NotFound("Fee type not found", details={"fee_type_id": fee_type_id})
        return fee_type

    def exists(self, fee_type_id: int) -> bool:
        return bool(self.db.execute(select(exists().where(FeeType.id == fee_type_id))).scalar())

    def name_by_id(self, fee_type_id: int) -> str:
        return self.get(fee_type_id).name

    def create(self, name: str) -> FeeType:
        name = _clean_name(name)
        with TransactionManager(self.db, "create fee type"):
            self._ensure_name_free(name)
            fee_type = FeeType(name=name)
            self.db.add(fee_type)
            self.db.flush()
        logger.info("Created fee type %s (%s)", fee_type.id, fee_type.name)
        return fee_type

    def update(self, fee_type_id: int, name: str) -> FeeType:
        name = _clean_name(name)
        with TransactionManager(self.db, "update fee type"):
            fee_type = self.get(fee_type_id)
            if name != fee_type.name:
                self._ensure_name_free(name)
                fee_type.name = name
            self.db.flush()
        return fee_type

    def delete(self, fee_type_id: int) -> None:
        with TransactionManager(self.db, "delete fee type"):
            fee_type = self.get(fee_type_id)
            in_use = self.db.execute(
                select(
                    exists().where(FeeStructure.fee_type_id == fee_type_id)
                    | exists().where(VoucherLineItem.fee_type_id == fee_type_id)
                )
            ).scalar()
            if in_use:
                logger.warning("Refused to delete fee type %s: still referenced", fee_type_id)
                raise Conflict(
                    "Fee type is in use by fee structures or voucher line items and cannot be deleted",
                    details={"fee_type_id": fee_type_id},
                )
            self.db.delete(fee_type)
            self.db.flush()
        logger.info("Deleted fee type %s", fee_type_id)

    def _ensure_name_free(self, name: str) -> None:
        taken = self.db.execute(select(exists().where(FeeType.name == name))).scalar()
        if taken:
            raise Conflict("Fee type name already exists", details={"name": name})


class FeeStructureCatalog:
    """Per class and academic year obligations: {fee type, amount, frequency}"""

    FIELDS = ("class_id", "fee_type_id", "amount", "frequency", "academic_year")

    def __init__(self, db: Session):
        self.db = db
        self.classes = ClassDirectory(db)
        self.fee_types = FeeTypeCatalog(db)

    def list_all(
        self,
        class_id: Optional[int] = None,
        academic_year: Optional[str] = None,
        frequency: Optional[str] = None,
    ) -> List[FeeStructure]:
        query = select(FeeStructure)
        if class_id is not None:
            query = query.where(FeeStructure.class_id == class_id)
        if academic_year is not None:
            query = query.where(FeeStructure.academic_year == academic_year)
        if frequency is not None:
            query = query.where(FeeStructure.frequency == frequency)
        query = query.order_by(FeeStructure.created_at.desc(), FeeStructure.id.desc())
        return list(self.db.execute(query).scalars().all())

    def structures_for(self, class_id: int, academic_year: str, frequency: str = "monthly") -> List[FeeStructure]:
        """Structures that apply to one class for a year, oldest first"""
        return list(
            self.db.execute(
                select(FeeStructure).where(
                    FeeStructure.class_id == class_id,
                    FeeStructure.academic_year == academic_year,
                    FeeStructure.frequency == frequency,
                ).order_by(FeeStructure.id)
            ).scalars().all()
        )

    def get(self, structure_id: int) -> FeeStructure:
        structure = self.db.get(FeeStructure, structure_id)
        if structure is None:
            raise NotFound("Fee structure not found", details={"fee_structure_id": structure_id})
        return structure

    def create(
        self,
        class_id: int,
        fee_type_id: int,
        amount: Any,
        frequency: str,
        academic_year: str,
    ) -> FeeStructure:
        values = self._validate({
            "class_id": class_id,
            "fee_type_id": fee_type_id,
            "amount": amount,
            "frequency": frequency,
            "academic_year": academic_year,
        })
        with TransactionManager(self.db, "create fee structure"):
            self._check_references(values)
            structure = FeeStructure(**values)
            self.db.add(structure)
            self.db.flush()
        logger.info(
            "Created fee structure %s: class %s, fee type %s, %s %s %s",
            structure.id, structure.class_id, structure.fee_type_id,
            structure.amount, structure.frequency, structure.academic_year,
        )
        return structure

    def update(self, structure_id: int, **changes: Any) -> FeeStructure:
        unknown = set(changes) - set(self.FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        provided = {k: v for k, v in changes.items() if v is not None}
        if not provided:
            raise ValidationError("Request body is empty")

        with TransactionManager(self.db, "update fee structure"):
            structure = self.get(structure_id)
            merged: Dict[str, Any] = {name: getattr(structure, name) for name in self.FIELDS}
            merged.update(provided)
            values = self._validate(merged)
            self._check_references(values)
            for name, value in values.items():
                setattr(structure, name, value)
            self.db.flush()
        logger.info("Updated fee structure %s", structure_id)
        return structure

    def delete(self, structure_id: int) -> None:
        with TransactionManager(self.db, "delete fee structure"):
            structure = self.get(structure_id)
            self.db.delete(structure)
            self.db.flush()
        logger.info("Deleted fee structure %s", structure_id)

    def _validate(self, values: Dict[str, Any]) -> Dict[str, Any]:
        missing = [name for name in self.FIELDS if values.get(name) in (None, "")]
        if missing:
            raise ValidationError("All fields are required", details={"missing": missing})
        parse_academic_year(values["academic_year"])
        return {
            "class_id": validate_id(values["class_id"], "class_id"),
            "fee_type_id": validate_id(values["fee_type_id"], "fee_type_id"),
            "amount": parse_amount(values["amount"]),
            "frequency": validate_frequency(values["frequency"]),
            "academic_year": values["academic_year"],
        }

    def _check_references(self, values: Dict[str, Any]) -> None:
        if not self.classes.class_exists(values["class_id"]):
            raise InvalidReference(
                "Invalid class_id: Class does not exist", details={"class_id": values["class_id"]}
            )
        if not self.fee_types.exists(values["fee_type_id"]):
            raise InvalidReference(
                "Invalid fee_type_id: Fee type does not exist", details={"fee_type_id": values["fee_type_id"]}
            )
