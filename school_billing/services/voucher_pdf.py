# school_billing/services/voucher_pdf.py
"""
Fee voucher documents.

Renders VoucherDetail projections to an A4 PDF, one page per voucher. This
module never talks to the database; it only lays out what it is given.
"""

from datetime import date
from io import BytesIO
from typing import Iterable, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from school_billing.services.dataclasses import VoucherDetail

BRAND = colors.HexColor("#007bff")
TEXT = colors.HexColor("#333333")
MUTED = colors.HexColor("#777777")
ROW_HEIGHT = 20


def _money(amount) -> str:
    return f"{amount:,.2f}"


def _draw_voucher(c: canvas.Canvas, voucher: VoucherDetail, school_name: str, issued_on: date) -> None:
    width, height = A4

    # Border
    c.setLineWidth(2)
    c.setStrokeColor(BRAND)
    c.rect(20, 20, width - 40, height - 40, stroke=1, fill=0)

    # Header
    c.setFillColor(BRAND)
    c.setFont("Helvetica-Bold", 24)
    c.drawCentredString(width / 2, height - 70, "Fee Voucher")
    c.setFillColor(TEXT)
    c.setFont("Helvetica", 12)
    c.drawCentredString(width / 2, height - 92, school_name)
    c.drawCentredString(width / 2, height - 110, f"Voucher ID: {voucher.id}")
    c.drawCentredString(width / 2, height - 128, f"Date: {issued_on:%B %d, %Y}")

    # Details
    y = height - 175
    c.setFont("Helvetica", 14)
    for label, value in (
        ("Student Name", voucher.student_name),
        ("Due Date", f"{voucher.due_date:%B %d, %Y}"),
        ("Status", voucher.status),
        ("Paid Amount", _money(voucher.paid_amount)),
    ):
        c.drawString(40, y, f"{label}: {value}")
        y -= 20

    # Table header
    y -= 20
    c.setFillColor(BRAND)
    c.rect(40, y, width - 80, ROW_HEIGHT, stroke=0, fill=1)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(50, y + 6, "Fee Type")
    c.drawRightString(width - 50, y + 6, "Amount")

    # Table rows
    c.setFont("Helvetica", 12)
    c.setLineWidth(1)
    c.setStrokeColor(TEXT)
    c.setFillColor(TEXT)
    for line in voucher.line_items:
        y -= ROW_HEIGHT
        if y < 120:
            c.showPage()
            y = height - 60
            c.setFont("Helvetica", 12)
            c.setFillColor(TEXT)
        c.rect(40, y, width - 80, ROW_HEIGHT, stroke=1, fill=0)
        c.drawString(50, y + 6, line.fee_type)
        c.drawRightString(width - 50, y + 6, _money(line.amount))

    # Totals
    y -= 35
    c.setFont("Helvetica-Bold", 16)
    c.drawRightString(width - 50, y, f"Total: {_money(voucher.total)}")
    y -= 22
    c.setFont("Helvetica", 12)
    c.drawRightString(width - 50, y, f"Balance: {_money(voucher.balance)}")

    # Footer
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 10)
    c.drawCentredString(width / 2, 60, f"Generated by {school_name}")
    c.drawCentredString(width / 2, 46, "Please pay by the due date to avoid late fees.")


def render_vouchers_pdf(
    vouchers: Iterable[VoucherDetail],
    school_name: str,
    issued_on: Optional[date] = None,
) -> bytes:
    """Lay out one page per voucher and return the PDF bytes"""
    issued_on = issued_on or date.today()
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle("Fee Vouchers")

    for voucher in vouchers:
        _draw_voucher(c, voucher, school_name, issued_on)
        c.showPage()

    c.save()
    pdf = buf.getvalue()
    buf.close()
    return pdf
