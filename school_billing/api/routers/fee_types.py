# school_billing/api/routers/fee_types.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from school_billing.core.db import get_db
from school_billing.schemas.common import DataEnvelope, MessageOut
from school_billing.schemas.fee import FeeTypeCreate, FeeTypeOut, FeeTypeUpdate
from school_billing.services.fee_catalog import FeeTypeCatalog

router = APIRouter(prefix="/fee-type", tags=["Fee Types"])


@router.get("", response_model=DataEnvelope[list[FeeTypeOut]])
def list_fee_types(db: Session = Depends(get_db)):
    rows = FeeTypeCatalog(db).list_all()
    return {"data": [FeeTypeOut.model_validate(r) for r in rows], "message": "Fee types retrieved successfully"}


@router.post("", response_model=DataEnvelope[FeeTypeOut], status_code=201)
def create_fee_type(payload: FeeTypeCreate, db: Session = Depends(get_db)):
    fee_type = FeeTypeCatalog(db).create(payload.name)
    return {"data": FeeTypeOut.model_validate(fee_type), "message": "Fee type created successfully"}


@router.get("/{fee_type_id}", response_model=DataEnvelope[FeeTypeOut])
def get_fee_type(fee_type_id: int, db: Session = Depends(get_db)):
    fee_type = FeeTypeCatalog(db).get(fee_type_id)
    return {"data": FeeTypeOut.model_validate(fee_type), "message": "Fee type retrieved successfully"}


@router.patch("/{fee_type_id}", response_model=DataEnvelope[FeeTypeOut])
def update_fee_type(fee_type_id: int, payload: FeeTypeUpdate, db: Session = Depends(get_db)):
    fee_type = FeeTypeCatalog(db).update(fee_type_id, payload.name)
    return {"data": FeeTypeOut.model_validate(fee_type), "message": "Fee type updated successfully"}


@router.delete("/{fee_type_id}", response_model=MessageOut)
def delete_fee_type(fee_type_id: int, db: Session = Depends(get_db)):
    FeeTypeCatalog(db).delete(fee_type_id)
    return {"message": "Fee type deleted successfully"}
