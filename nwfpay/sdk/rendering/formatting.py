"""Presentation helpers shared by every paystub layout.

All rounding to cents happens here, on the way out. Stored records keep
their unrounded values.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional, Tuple

from ..schemas import Employee, PayrollRun, Paystub, ProfileModel, YtdTotals, safe_number

PLACEHOLDER = "—"  # em dash, for unavailable dates
TAG_PREFIX = "NWF_PAYSTUB_"


def money(value: Any) -> str:
    """Fixed two-decimal currency with thousands separators (1,234.50)."""
    return f"{safe_number(value):,.2f}"


def format_date(value: Optional[date]) -> str:
    """US-style date (MM/DD/YYYY), or the placeholder when unavailable."""
    if value is None:
        return PLACEHOLDER
    return value.strftime("%m/%d/%Y")


def display_employee_id(employee: Employee) -> str:
    """External ID when assigned, else Emp_ plus the last 8 chars of the record ID."""
    if employee.external_employee_id:
        return employee.external_employee_id
    return f"Emp_{employee.id[-8:]}"


def mask_employee_id(employee_id: str) -> str:
    """XXXXXX plus the last 6 characters for IDs at least 6 long."""
    if employee_id and len(employee_id) >= 6:
        return "XXXXXX" + employee_id[-6:]
    return employee_id or ""


def verification_tag(paystub_id: str) -> str:
    """Machine-readable tag embedded in the layout for traceability."""
    return f"{TAG_PREFIX}{paystub_id}"


def verification_url(base_url: str, code: Optional[str]) -> str:
    if not code:
        return base_url
    return f"{base_url.rstrip('/')}/{code}"


@dataclass
class StubView:
    """Everything a layout prints, already formatted as strings."""

    company_name: str
    company_lines: List[str]
    employee_name: str
    employee_last_first: str
    employee_id: str
    masked_employee_id: str
    email: str
    address_lines: List[str]
    bank_line: str
    pay_date: str
    period_start: str
    period_end: str
    pay_frequency: str
    pay_type: str
    hours: str
    rate: str
    gross: str
    ytd_gross: str
    deductions: List[Tuple[str, str, str]] = field(default_factory=list)
    net_pay: str = "0.00"
    ytd_net: str = "0.00"
    verification_code: str = ""
    verification_url: str = ""
    tag: str = ""
    copies: int = 2


def build_stub_view(
    employee: Employee,
    run: PayrollRun,
    paystub: Paystub,
    ytd: YtdTotals,
    profile: Optional[ProfileModel] = None,
) -> StubView:
    """Merge employee identity, one run and YTD totals into display strings.

    Optional address and bank fields come through as empty strings; the
    layouts skip blank lines rather than fail.
    """
    profile = profile or ProfileModel()
    employer = profile.employer
    address = employee.address

    city_line = " ".join(p for p in [address.city, address.state, address.zip] if p)
    address_lines = [line for line in [address.line1, address.line2, city_line] if line]

    bank = employee.direct_deposit
    bank_line = ""
    if employee.pay_method == "direct_deposit" and bank.account_number_last4:
        bank_line = f"{bank.account_type} ****{bank.account_number_last4}"
        if bank.bank_name:
            bank_line = f"{bank.bank_name} {bank_line}"

    last_first = ", ".join(p for p in [employee.last_name, employee.first_name] if p)
    employee_id = display_employee_id(employee)

    deductions = [
        ("Federal Income Tax", money(run.federal_income_tax), money(ytd.federal_income_tax)),
        ("State Income Tax", money(run.state_income_tax), money(ytd.state_income_tax)),
        ("Social Security", money(run.social_security), money(ytd.social_security)),
        ("Medicare", money(run.medicare), money(ytd.medicare)),
        ("Total Taxes", money(run.total_taxes), money(ytd.total_taxes)),
    ]

    return StubView(
        company_name=employee.company_name or employer.name,
        company_lines=[line for line in [employer.address_line1, employer.address_line2] if line],
        employee_name=employee.full_name or "Employee",
        employee_last_first=last_first or "Employee",
        employee_id=employee_id,
        masked_employee_id=mask_employee_id(employee_id),
        email=employee.email,
        address_lines=address_lines,
        bank_line=bank_line,
        pay_date=format_date(paystub.pay_date),
        period_start=format_date(run.period_start),
        period_end=format_date(run.period_end),
        pay_frequency=run.pay_frequency,
        pay_type=run.pay_type,
        hours=f"{run.hours_worked:.2f}",
        rate=money(run.hourly_rate),
        gross=money(run.gross_pay),
        ytd_gross=money(ytd.gross),
        deductions=deductions,
        net_pay=money(run.net_pay),
        ytd_net=money(ytd.net),
        verification_code=paystub.verification_code or "",
        verification_url=verification_url(profile.verification.base_url, paystub.verification_code),
        tag=verification_tag(paystub.id),
        copies=profile.documents.copies,
    )
