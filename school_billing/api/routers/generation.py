# school_billing/api/routers/generation.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from school_billing.core.config import settings
from school_billing.core.db import get_db
from school_billing.schemas.common import DataEnvelope
from school_billing.schemas.voucher import GenerateMonthlyIn, GeneratedVoucherOut, VoucherDetailOut
from school_billing.services.generation import FeeGenerationService
from school_billing.services.statements import StatementService
from school_billing.services.voucher_pdf import render_vouchers_pdf

router = APIRouter(prefix="/fees", tags=["Fee Generation"])


@router.post("/generate-monthly", response_model=DataEnvelope[list[GeneratedVoucherOut]], status_code=201)
def generate_monthly_fees(payload: GenerateMonthlyIn, db: Session = Depends(get_db)):
    """
    Generate this month's vouchers for every student (or one class).
    Students without monthly fee structures, or already billed for the
    month, are left out of the result.
    """
    result = FeeGenerationService(db).generate_monthly(
        academic_year=payload.academic_year,
        month=payload.month,
        class_id=payload.class_id,
    )
    return {
        "data": [GeneratedVoucherOut.model_validate(v) for v in result.vouchers],
        "message": result.message,
    }


@router.get("/vouchers/statement", response_model=DataEnvelope[list[VoucherDetailOut]])
def voucher_statements(
    db: Session = Depends(get_db),
    academic_year: str = Query(..., description="YYYY-YYYY"),
    month: int = Query(..., description="1-12"),
    class_id: Optional[int] = Query(None, description="Only vouchers of students in this class"),
):
    details = StatementService(db).period_statements(academic_year, month, class_id)
    return {
        "data": [VoucherDetailOut.model_validate(d, from_attributes=True) for d in details],
        "message": "Vouchers retrieved successfully",
    }


@router.get("/vouchers/bulk-pdf")
def bulk_voucher_pdf(
    db: Session = Depends(get_db),
    academic_year: str = Query(..., description="YYYY-YYYY"),
    month: int = Query(..., description="1-12"),
    class_id: Optional[int] = Query(None, description="Only vouchers of students in this class"),
):
    details = StatementService(db).period_statements(academic_year, month, class_id)
    pdf = render_vouchers_pdf(details, settings.SCHOOL_NAME)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=bulk-vouchers-{academic_year}-month-{month}.pdf"},
    )
