"""Vector W-2 wage statement drawn with ReportLab.

A single Letter page: employer and employee blocks on the left, the
numbered federal boxes in a two-column grid, and the state row at the
bottom. Values arrive as the box dict built by sdk.w2.
"""

import io
from typing import Dict, List, Optional

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from ..schemas import Employee, ProfileModel
from .formatting import display_employee_id, mask_employee_id, money
from .pdf import MARGIN, PAGE_HEIGHT, PAGE_WIDTH

BOX_HEIGHT = 34
IDENTITY_WIDTH = 250

# (box number, label, key in the box dict); drawn left to right, two per row
FEDERAL_BOXES = [
    ("1", "Wages, tips, other compensation", "wages"),
    ("2", "Federal income tax withheld", "federal_tax_withheld"),
    ("3", "Social security wages", "social_security_wages"),
    ("4", "Social security tax withheld", "social_security_tax"),
    ("5", "Medicare wages and tips", "medicare_wages"),
    ("6", "Medicare tax withheld", "medicare_tax"),
]


def _box(c: canvas.Canvas, x: float, top: float, width: float, label: str, lines: List[str],
         value: Optional[str] = None) -> None:
    c.rect(x, top - BOX_HEIGHT, width, BOX_HEIGHT)
    c.setFont("Helvetica", 6.5)
    c.drawString(x + 3, top - 9, label)
    c.setFont("Helvetica", 9)
    line_y = top - 20
    for line in lines:
        c.drawString(x + 5, line_y, line)
        line_y -= 10
    if value is not None:
        c.setFont("Helvetica-Bold", 10)
        c.drawRightString(x + width - 5, top - BOX_HEIGHT + 7, value)


def render_w2_pdf(
    employee: Employee,
    year: int,
    boxes: Dict[str, float],
    profile: Optional[ProfileModel] = None,
    run_count: int = 0,
) -> bytes:
    """Draw the wage statement and return unsigned PDF bytes."""
    profile = profile or ProfileModel()
    employer = profile.employer

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=LETTER)
    c.setTitle(f"W-2 - {employee.full_name} - {year}")

    top = PAGE_HEIGHT - MARGIN
    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(PAGE_WIDTH / 2, top - 16, f"Form W-2 Wage and Tax Statement {year}")
    c.setFont("Helvetica", 8)
    c.drawCentredString(PAGE_WIDTH / 2, top - 30, "Copy B - To Be Filed With Employee's FEDERAL Tax Return")
    top -= 48

    employee_id = mask_employee_id(display_employee_id(employee))
    address = employee.address
    city_line = " ".join(p for p in [address.city, address.state, address.zip] if p)
    employee_lines = [line for line in [employee.full_name or "Employee", address.line1, address.line2, city_line] if line]
    employer_lines = [line for line in [employee.company_name or employer.name,
                                        employer.address_line1, employer.address_line2] if line]

    # Identity column on the left, federal boxes on the right
    grid_x = MARGIN + IDENTITY_WIDTH
    grid_width = (PAGE_WIDTH - MARGIN - grid_x) / 2

    _box(c, MARGIN, top, IDENTITY_WIDTH, "a  Employee's identification", [employee_id])
    _box(c, MARGIN, top - BOX_HEIGHT, IDENTITY_WIDTH, "c  Employer's name and address", employer_lines[:1])
    c.setFont("Helvetica", 8)
    line_y = top - 2 * BOX_HEIGHT - 10
    for line in employer_lines[1:]:
        c.drawString(MARGIN + 5, line_y, line)
        line_y -= 10

    row_top = top
    for index, (number, label, key) in enumerate(FEDERAL_BOXES):
        column = index % 2
        _box(c, grid_x + column * grid_width, row_top, grid_width, f"{number}  {label}", [],
             money(boxes.get(key, 0.0)))
        if column == 1:
            row_top -= BOX_HEIGHT

    top = min(row_top, line_y) - 12
    _box(c, MARGIN, top, IDENTITY_WIDTH, "e/f  Employee's name and address", employee_lines[:1])
    c.setFont("Helvetica", 8)
    line_y = top - BOX_HEIGHT - 10
    for line in employee_lines[1:]:
        c.drawString(MARGIN + 5, line_y, line)
        line_y -= 10

    # State row
    state_top = min(top - BOX_HEIGHT, line_y) - 12
    state_width = (PAGE_WIDTH - 2 * MARGIN) / 3
    _box(c, MARGIN, state_top, state_width, "15  State", [employee.jurisdiction or "-"])
    _box(c, MARGIN + state_width, state_top, state_width, "16  State wages, tips, etc.", [],
         money(boxes.get("state_wages", 0.0)))
    _box(c, MARGIN + 2 * state_width, state_top, state_width, "17  State income tax", [],
         money(boxes.get("state_tax", 0.0)))

    c.setFont("Helvetica", 7)
    c.setFillColorRGB(0.42, 0.45, 0.5)
    c.drawString(MARGIN, state_top - BOX_HEIGHT - 14,
                 f"Totals of {run_count} payroll run(s) paid January 1 - December 31, {year}.")

    c.showPage()
    c.save()
    return buffer.getvalue()
