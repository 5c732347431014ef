# school_billing/api/routers/fee_structures.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from school_billing.core.db import get_db
from school_billing.schemas.common import DataEnvelope, MessageOut
from school_billing.schemas.fee import FeeStructureCreate, FeeStructureOut, FeeStructureUpdate
from school_billing.services.fee_catalog import FeeStructureCatalog

router = APIRouter(prefix="/fee-structure", tags=["Fee Structures"])


@router.get("", response_model=DataEnvelope[list[FeeStructureOut]])
def list_fee_structures(
    db: Session = Depends(get_db),
    class_id: Optional[int] = Query(None, description="Only structures for this class"),
    academic_year: Optional[str] = Query(None, description="Only structures for this academic year"),
    frequency: Optional[str] = Query(None, description="monthly, annual or one-time"),
):
    rows = FeeStructureCatalog(db).list_all(class_id=class_id, academic_year=academic_year, frequency=frequency)
    return {"data": [FeeStructureOut.model_validate(r) for r in rows], "message": "Fee structures retrieved successfully"}


@router.post("", response_model=DataEnvelope[FeeStructureOut], status_code=201)
def create_fee_structure(payload: FeeStructureCreate, db: Session = Depends(get_db)):
    structure = FeeStructureCatalog(db).create(
        class_id=payload.class_id,
        fee_type_id=payload.fee_type_id,
        amount=payload.amount,
        frequency=payload.frequency,
        academic_year=payload.academic_year,
    )
    return {"data": FeeStructureOut.model_validate(structure), "message": "Fee structure created successfully"}


@router.get("/{structure_id}", response_model=DataEnvelope[FeeStructureOut])
def get_fee_structure(structure_id: int, db: Session = Depends(get_db)):
    structure = FeeStructureCatalog(db).get(structure_id)
    return {"data": FeeStructureOut.model_validate(structure), "message": "Fee structure retrieved successfully"}


@router.patch("/{structure_id}", response_model=DataEnvelope[FeeStructureOut])
def update_fee_structure(structure_id: int, payload: FeeStructureUpdate, db: Session = Depends(get_db)):
    structure = FeeStructureCatalog(db).update(structure_id, **payload.model_dump(exclude_unset=True))
    return {"data": FeeStructureOut.model_validate(structure), "message": "Fee structure updated successfully"}


@router.delete("/{structure_id}", response_model=MessageOut)
def delete_fee_structure(structure_id: int, db: Session = Depends(get_db)):
    FeeStructureCatalog(db).delete(structure_id)
    return {"message": "Fee structure deleted successfully"}
