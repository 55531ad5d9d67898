"""Year-end W-2 wage statement from stored payroll runs.

The statement is the same YTD aggregation a paystub carries, taken as of
December 31 of the tax year, then laid out as W-2 boxes and certified like
any other issued PDF.

Design Rationale
----------------

Why box values come from accumulate():
    A paystub's YTD snapshot and the W-2 for the same year are sums over
    the same stored runs in the same order. Reusing the aggregator keeps
    the December stub and the W-2 identical to the cent.

Why social security and medicare wages equal gross:
    Hourly pay here has no pre-tax deductions and social security is
    withheld at a flat rate with no wage base cap, so boxes 3 and 5
    report gross wages as-is.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

from . import records
from .certify import DocumentCertifier
from .payroll import PDF_CONTENT_TYPE, PaystubDocument
from .records import EmployeeNotFoundError
from .rendering import RenderError, display_employee_id, render_w2_pdf
from .schemas import Employee, ProfileModel, YtdTotals
from .ytd import accumulate

logger = logging.getLogger(__name__)


@dataclass
class WageStatement:
    """Calendar-year totals for one employee."""

    employee: Employee
    year: int
    totals: YtdTotals
    run_count: int = 0

    @property
    def boxes(self) -> Dict[str, float]:
        """W-2 box values rounded to cents."""
        totals = self.totals
        state_wages = totals.gross if totals.state_income_tax > 0 else 0.0
        return {
            "wages": round(totals.gross, 2),
            "federal_tax_withheld": round(totals.federal_income_tax, 2),
            "social_security_wages": round(totals.gross, 2),
            "social_security_tax": round(totals.social_security, 2),
            "medicare_wages": round(totals.gross, 2),
            "medicare_tax": round(totals.medicare, 2),
            "state_wages": round(state_wages, 2),
            "state_tax": round(totals.state_income_tax, 2),
        }


def build_w2_file_name(employee: Employee, year: int, prefix: str = "nwf") -> str:
    """Suggested download name: <prefix>_W2_<employee id>_<year>.pdf."""
    employee_part = re.sub(r"[^A-Za-z0-9_-]+", "_", display_employee_id(employee))
    return f"{prefix}_W2_{employee_part}_{year}.pdf"


def build_wage_statement(employee_id: str, year: int) -> WageStatement:
    """Aggregate every run paid in the year.

    Raises:
        EmployeeNotFoundError: If the employee does not exist
    """
    employee = records.find_employee_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFoundError(employee_id)

    year_end = date(year, 12, 31)
    runs = records.find_payroll_runs_for_employee(employee.id, date(year, 1, 1), year_end)
    totals = accumulate(runs, year_end, employee_id=employee.id)
    logger.info(f"W-2 {year} for {employee.id}: {len(runs)} run(s), wages {totals.gross:.2f}")
    return WageStatement(employee=employee, year=year, totals=totals, run_count=len(runs))


async def produce_wage_statement(
    statement: WageStatement,
    profile: Optional[ProfileModel] = None,
) -> PaystubDocument:
    """Render the W-2 layout and certify it.

    Raises:
        RenderError: If the layout cannot be drawn
        CertificationError: Propagated from the certifier
    """
    profile = profile or ProfileModel()
    try:
        raw = await asyncio.to_thread(
            render_w2_pdf, statement.employee, statement.year, statement.boxes, profile, statement.run_count,
        )
    except Exception as e:
        logger.error(f"W-2 render failed for {statement.employee.id} ({statement.year}): {e}")
        raise RenderError(f"Could not render W-2 for {statement.employee.id}: {e}") from e

    certified = await DocumentCertifier(profile.certification).certify(raw)
    return PaystubDocument(
        content=certified,
        file_name=build_w2_file_name(statement.employee, statement.year, profile.documents.file_prefix),
        content_type=PDF_CONTENT_TYPE,
        certified=True,
    )
