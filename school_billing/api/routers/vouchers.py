# school_billing/api/routers/vouchers.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from school_billing.core.config import settings
from school_billing.core.db import get_db
from school_billing.schemas.common import DataEnvelope, MessageOut
from school_billing.schemas.voucher import (
    LineItemCreate, LineItemOut, LineItemUpdate, PaymentIn,
    VoucherCreate, VoucherDetailOut, VoucherOut, VoucherPageOut, VoucherSummaryOut,
)
from school_billing.services.payments import PaymentService
from school_billing.services.statements import StatementService
from school_billing.services.voucher_pdf import render_vouchers_pdf
from school_billing.services.vouchers import VoucherLedger

router = APIRouter(prefix="/fee", tags=["Fee Vouchers"])


@router.post("/vouchers", response_model=DataEnvelope[VoucherOut], status_code=201)
def create_voucher(payload: VoucherCreate, db: Session = Depends(get_db)):
    voucher = VoucherLedger(db).create_voucher(payload.student_id, payload.due_date)
    return {"data": VoucherOut.model_validate(voucher), "message": "Voucher created successfully"}


@router.get("/vouchers/{voucher_id}", response_model=DataEnvelope[VoucherDetailOut])
def get_voucher(voucher_id: int, db: Session = Depends(get_db)):
    detail = VoucherLedger(db).get_voucher(voucher_id)
    return {"data": VoucherDetailOut.model_validate(detail, from_attributes=True), "message": "Voucher retrieved successfully"}


@router.patch("/vouchers/{voucher_id}/payment", response_model=DataEnvelope[VoucherSummaryOut])
def apply_payment(voucher_id: int, payload: PaymentIn, db: Session = Depends(get_db)):
    summary = PaymentService(db).apply_payment(voucher_id, payload.amount)
    return {"data": VoucherSummaryOut.model_validate(summary, from_attributes=True), "message": "Payment updated successfully"}


@router.get("/vouchers/{voucher_id}/pdf")
def voucher_pdf(voucher_id: int, db: Session = Depends(get_db)):
    detail = StatementService(db).voucher_statement(voucher_id)
    pdf = render_vouchers_pdf([detail], settings.SCHOOL_NAME)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=voucher-{voucher_id}.pdf"},
    )


@router.get("/student/{student_id}", response_model=VoucherPageOut)
def list_student_vouchers(
    student_id: int,
    db: Session = Depends(get_db),
    page: int = Query(1, description="1-based page number"),
    limit: Optional[int] = Query(None, description="Vouchers per page"),
):
    result = VoucherLedger(db).list_vouchers(student_id, page=page, limit=limit)
    return {
        "data": [VoucherSummaryOut.model_validate(item, from_attributes=True) for item in result.items],
        "pagination": {"page": result.page, "limit": result.limit, "total": result.total},
        "message": "Vouchers retrieved successfully",
    }


@router.delete("/vouchers/{voucher_id}", response_model=MessageOut)
def delete_voucher(voucher_id: int, db: Session = Depends(get_db)):
    VoucherLedger(db).delete_voucher(voucher_id)
    return {"message": "Voucher deleted successfully"}


# Line items ("fee voucher details")

@router.post("/details", response_model=DataEnvelope[LineItemOut], status_code=201)
def create_line_item(payload: LineItemCreate, db: Session = Depends(get_db)):
    item = VoucherLedger(db).add_line_item(payload.voucher_id, payload.fee_type_id, payload.amount)
    return {"data": LineItemOut.model_validate(item), "message": "Fee voucher detail created successfully"}


@router.get("/details", response_model=DataEnvelope[list[LineItemOut]])
def list_line_items(
    db: Session = Depends(get_db),
    voucher_id: Optional[int] = Query(None, description="Only line items of this voucher"),
):
    items = VoucherLedger(db).list_line_items(voucher_id)
    return {"data": [LineItemOut.model_validate(i) for i in items], "message": "Fee voucher details retrieved successfully"}


@router.get("/details/{item_id}", response_model=DataEnvelope[LineItemOut])
def get_line_item(item_id: int, db: Session = Depends(get_db)):
    item = VoucherLedger(db).get_line_item(item_id)
    return {"data": LineItemOut.model_validate(item), "message": "Fee voucher detail retrieved successfully"}


@router.patch("/details/{item_id}", response_model=DataEnvelope[LineItemOut])
def update_line_item(item_id: int, payload: LineItemUpdate, db: Session = Depends(get_db)):
    item = VoucherLedger(db).update_line_item(item_id, **payload.model_dump(exclude_unset=True))
    return {"data": LineItemOut.model_validate(item), "message": "Fee voucher detail updated successfully"}


@router.delete("/details/{item_id}", response_model=MessageOut)
def delete_line_item(item_id: int, db: Session = Depends(get_db)):
    VoucherLedger(db).delete_line_item(item_id)
    return {"message": "Fee voucher detail deleted successfully"}
