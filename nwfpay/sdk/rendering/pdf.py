"""Vector paystub layout drawn with ReportLab.

One Letter page holding two identical stub copies (employee and employer
copy) separated by a dashed tear line, or a single stub when the profile
sets documents.copies = 1.
"""

import io

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from .base import PaystubRenderer
from .formatting import StubView

PAGE_WIDTH, PAGE_HEIGHT = LETTER
MARGIN = 36
STUB_HEIGHT = (PAGE_HEIGHT - 2 * MARGIN) / 2

# Column anchors (right-aligned numbers)
COL_HOURS = 300
COL_RATE = 370
COL_CURRENT = 460
COL_YTD = PAGE_WIDTH - MARGIN
COL_RIGHT_BLOCK = 380

TAG_OPACITY = 0.06


class ReportLabPaystubRenderer(PaystubRenderer):
    """Fixed-layout PDF paystub."""

    format = "pdf"
    content_type = "application/pdf"
    extension = "pdf"

    def _render_view(self, view: StubView) -> bytes:
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=LETTER)
        c.setTitle(f"Paystub - {view.employee_name} - {view.pay_date}")

        top = PAGE_HEIGHT - MARGIN
        for copy in range(view.copies):
            _draw_stub(c, view, top)
            if copy + 1 < view.copies:
                _draw_tear_line(c, top - STUB_HEIGHT)
            top -= STUB_HEIGHT

        c.showPage()
        c.save()
        return buffer.getvalue()


def _draw_tear_line(c: canvas.Canvas, y: float) -> None:
    c.saveState()
    c.setStrokeColorRGB(0.61, 0.64, 0.69)
    c.setDash(3, 3)
    c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    c.restoreState()


def _rule(c: canvas.Canvas, y: float) -> None:
    c.saveState()
    c.setStrokeColorRGB(0.8, 0.8, 0.8)
    c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    c.restoreState()


def _draw_stub(c: canvas.Canvas, view: StubView, top: float) -> None:
    # Company block (left) + pay info (right)
    y = top - 14
    c.setFont("Helvetica-Bold", 13)
    c.drawString(MARGIN, y, view.company_name)
    c.setFont("Helvetica", 8)
    line_y = y - 12
    for line in view.company_lines + ["Official Pay Statement"]:
        c.drawString(MARGIN, line_y, line)
        line_y -= 10

    c.setFont("Helvetica", 9)
    c.drawString(COL_RIGHT_BLOCK, y, "Check Date:")
    c.drawRightString(COL_YTD, y, view.pay_date)
    c.drawString(COL_RIGHT_BLOCK, y - 12, "Period Beginning:")
    c.drawRightString(COL_YTD, y - 12, view.period_start)
    c.drawString(COL_RIGHT_BLOCK, y - 24, "Period Ending:")
    c.drawRightString(COL_YTD, y - 24, view.period_end)
    c.drawString(COL_RIGHT_BLOCK, y - 36, "Pay Frequency:")
    c.drawRightString(COL_YTD, y - 36, view.pay_frequency)

    # Employee block
    y = top - 70
    c.setFont("Helvetica-Bold", 9)
    c.drawString(MARGIN, y, "EMPLOYEE")
    c.setFont("Helvetica", 9)
    c.drawString(MARGIN, y - 12, view.employee_last_first)
    c.drawString(MARGIN, y - 24, f"Employee ID: {view.employee_id}")
    line_y = y - 36
    for line in view.address_lines:
        c.drawString(MARGIN, line_y, line)
        line_y -= 11

    c.drawString(COL_RIGHT_BLOCK, y, f"Pay Type: {view.pay_type}")
    if view.email:
        c.drawString(COL_RIGHT_BLOCK, y - 12, view.email)
    if view.bank_line:
        c.drawString(COL_RIGHT_BLOCK, y - 24, f"Deposit: {view.bank_line}")

    # Earnings
    y = top - 145
    c.setFont("Helvetica-Bold", 9)
    c.drawString(MARGIN, y, "EARNINGS")
    c.drawRightString(COL_HOURS, y, "Hours")
    c.drawRightString(COL_RATE, y, "Rate")
    c.drawRightString(COL_CURRENT, y, "Current")
    c.drawRightString(COL_YTD, y, "YTD")
    _rule(c, y - 4)

    c.setFont("Helvetica", 9)
    y -= 16
    c.drawString(MARGIN, y, "Regular")
    c.drawRightString(COL_HOURS, y, view.hours)
    c.drawRightString(COL_RATE, y, view.rate)
    c.drawRightString(COL_CURRENT, y, view.gross)
    c.drawRightString(COL_YTD, y, view.ytd_gross)
    y -= 12
    c.setFont("Helvetica-Bold", 9)
    c.drawString(MARGIN, y, "Total Earnings")
    c.drawRightString(COL_CURRENT, y, view.gross)
    c.drawRightString(COL_YTD, y, view.ytd_gross)

    # Deductions
    y -= 22
    c.drawString(MARGIN, y, "DEDUCTIONS")
    c.drawRightString(COL_CURRENT, y, "Current")
    c.drawRightString(COL_YTD, y, "YTD")
    _rule(c, y - 4)

    y -= 16
    for label, current, ytd in view.deductions:
        c.setFont("Helvetica-Bold" if label == "Total Taxes" else "Helvetica", 9)
        c.drawString(MARGIN, y, label)
        c.drawRightString(COL_CURRENT, y, f"({current})")
        c.drawRightString(COL_YTD, y, f"({ytd})")
        y -= 12

    # Net pay summary
    y -= 10
    _rule(c, y + 8)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, "Net Pay This Period:")
    c.drawRightString(COL_CURRENT, y, f"${view.net_pay}")
    c.drawString(COL_RIGHT_BLOCK + 20, y, "YTD Net Pay:")
    c.drawRightString(COL_YTD, y, f"${view.ytd_net}")

    # Footer + verification
    y -= 20
    c.setFont("Helvetica", 7)
    c.setFillColorRGB(0.33, 0.33, 0.33)
    c.drawString(
        MARGIN, y,
        f"This pay statement has been prepared by {view.company_name}. "
        "Altering figures on this document is detectable via its verification record.",
    )
    if view.verification_code:
        c.drawString(MARGIN, y - 10, f"Verification Code: {view.verification_code}")
        c.drawString(MARGIN + 150, y - 10, f"Verify online at: {view.verification_url}")

    c.saveState()
    c.setFillAlpha(TAG_OPACITY)
    c.setFont("Helvetica", 6)
    c.drawRightString(COL_YTD, y - 20, view.tag)
    c.restoreState()
    c.setFillColorRGB(0, 0, 0)
