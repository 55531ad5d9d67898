"""Payroll run pipeline.

This module contains the end-to-end flow for one employee per invocation:

    employee lookup -> gross pay -> itemized taxes -> store run
      -> re-read year history -> YTD totals -> store paystub
      -> render -> (browser backend) -> certify -> store artifact

Design Rationale
----------------

Why YTD is computed after the run is stored:
    The current run must be part of its own YTD. Aggregating strictly
    after create_payroll_run() and re-querying history means "include the
    current run" and "re-query later" give the same numbers, with no
    special-casing of the in-flight run.

Why gross/net always come from the itemized calculation:
    Every document format uses the same stored PayrollRun. There is no
    per-format shortcut (such as net = 90% of gross), so the vector PDF,
    the HTML preview and the browser-printed PDF always agree.

Why certification is not optional for PDFs:
    A PDF never leaves this module without passing through the certifier.

Why a failed document discards the run:
    A paystub is issued together with its payroll run. When the document
    cannot be produced or stored, process_payroll() deletes both records
    before re-raising. A retried request then counts the pay once in YTD.
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from . import records
from .backends import ChromiumBackend, HtmlToPdfBackend, PageOptions
from .certify import DocumentCertifier
from .records import EmployeeNotFoundError
from .rendering import HtmlPaystubRenderer, ReportLabPaystubRenderer, display_employee_id
from .schemas import Employee, PayrollRun, Paystub, ProfileModel, YtdTotals, safe_number
from .taxes import TaxPolicy, compute_gross_pay, compute_taxes_for_paycheck
from .ytd import accumulate, year_window

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

# Formats produce_document() understands. The two PDF formats are certified.
DOCUMENT_FORMATS = ("pdf", "html-pdf", "html")


class PayrollInputError(ValueError):
    """Raised for payroll requests that cannot produce a valid run."""
    pass


@dataclass
class PaystubDocument:
    """A rendered paystub ready for delivery."""

    content: bytes
    file_name: str
    content_type: str
    certified: bool

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.content).hexdigest()


@dataclass
class PayrollResult:
    employee: Employee
    run: PayrollRun
    paystub: Paystub
    document: Optional[PaystubDocument] = None

    @property
    def ytd(self) -> YtdTotals:
        return self.paystub.ytd


def build_file_name(employee: Employee, pay_date: date, prefix: str = "nwf", extension: str = "pdf") -> str:
    """Suggested download name: <prefix>_<employee id>_<ISO date>.<ext>."""
    employee_part = re.sub(r"[^A-Za-z0-9_-]+", "_", display_employee_id(employee))
    return f"{prefix}_{employee_part}_{pay_date.isoformat()}.{extension}"


def _check_period(period_start: Optional[date], period_end: Optional[date], pay_date: date) -> None:
    """Reject inconsistent periods before anything is written.

    PayrollRun also validates start <= end when the record is built; that
    model check is the backstop for callers that bypass run_payroll().
    """
    if period_start and period_end and period_start > period_end:
        raise PayrollInputError(f"Period start {period_start} is after period end {period_end}")
    if period_start and pay_date < period_start:
        raise PayrollInputError(f"Pay date {pay_date} is before the period start {period_start}")
    if period_end and pay_date > period_end:
        raise PayrollInputError(f"Pay date {pay_date} is after the period end {period_end}")


def run_payroll(
    employee_id: str,
    pay_date: date,
    hours: Any,
    rate: Any = None,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
    profile: Optional[ProfileModel] = None,
) -> PayrollResult:
    """Compute and store one payroll run and its paystub record.

    Args:
        employee_id: Employee record ID
        pay_date: Check date; must fall within the period (or at its end)
        hours: Hours worked; non-numeric input counts as 0
        rate: Hourly rate override; defaults to the employee's hourly_rate
        period_start: First day of the pay period (optional)
        period_end: Last day of the pay period (optional)
        profile: Loaded profile (defaults when None)

    Returns:
        PayrollResult with the stored run and paystub (no document yet)

    Raises:
        EmployeeNotFoundError: If the employee does not exist
        PayrollInputError: For negative hours or an inconsistent period
    """
    profile = profile or ProfileModel()

    employee = records.find_employee_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFoundError(employee_id)

    _check_period(period_start, period_end, pay_date)

    hours_worked = safe_number(hours)
    if hours_worked < 0:
        raise PayrollInputError(f"Hours worked cannot be negative: {hours_worked}")
    hourly_rate = employee.hourly_rate if rate is None else safe_number(rate)

    gross = compute_gross_pay(hours_worked, hourly_rate)
    taxes = compute_taxes_for_paycheck(employee, gross, TaxPolicy.from_profile(profile.tax))

    run = records.create_payroll_run({
        "employee_id": employee.id,
        "pay_type": employee.pay_type,
        "pay_frequency": employee.pay_frequency,
        "period_start": period_start,
        "period_end": period_end,
        "pay_date": pay_date,
        "hours_worked": hours_worked,
        "hourly_rate": hourly_rate,
        "gross_pay": gross,
        **taxes.model_dump(),
    })

    # The history read happens after the write so it includes this run.
    history = records.find_payroll_runs_for_employee(employee.id, *year_window(pay_date))
    ytd = accumulate(history, pay_date, employee_id=employee.id)

    paystub = records.create_paystub({
        "employee_id": employee.id,
        "payroll_run_id": run.id,
        "pay_date": pay_date,
        "file_name": build_file_name(employee, pay_date, profile.documents.file_prefix),
        "ytd": ytd.model_dump(),
    })

    return PayrollResult(employee=employee, run=run, paystub=paystub)


async def produce_document(
    employee: Employee,
    run: PayrollRun,
    paystub: Paystub,
    fmt: str = "pdf",
    profile: Optional[ProfileModel] = None,
    backend: Optional[HtmlToPdfBackend] = None,
) -> PaystubDocument:
    """Render a paystub and, for PDF formats, certify it.

    Formats:
        pdf       vector layout (ReportLab), certified
        html-pdf  HTML layout printed by the browser backend, certified
        html      HTML markup only, not certified

    Raises:
        ValueError: Unknown format
        RenderError, BackendError, CertificationError: propagated as-is
    """
    profile = profile or ProfileModel()
    ytd = paystub.ytd

    if fmt == "html":
        markup = await HtmlPaystubRenderer(profile).render(employee, run, paystub, ytd)
        return PaystubDocument(
            content=markup,
            file_name=re.sub(r"\.pdf$", ".html", paystub.file_name),
            content_type=HtmlPaystubRenderer.content_type,
            certified=False,
        )

    if fmt == "pdf":
        raw = await ReportLabPaystubRenderer(profile).render(employee, run, paystub, ytd)
    elif fmt == "html-pdf":
        markup = await HtmlPaystubRenderer(profile).render(employee, run, paystub, ytd)
        backend = backend or ChromiumBackend()
        raw = await backend.html_to_pdf(markup.decode("utf-8"), PageOptions())
    else:
        raise ValueError(f"Unknown document format '{fmt}'. Expected one of: {', '.join(DOCUMENT_FORMATS)}")

    certified = await DocumentCertifier(profile.certification).certify(raw)
    logger.info(f"Certified {fmt} paystub {paystub.id} ({len(certified)} bytes)")
    return PaystubDocument(
        content=certified,
        file_name=paystub.file_name,
        content_type=PDF_CONTENT_TYPE,
        certified=True,
    )


def store_document(paystub: Paystub, document: PaystubDocument) -> Paystub:
    """Write a certified document to the artifacts directory and attach it.

    Only certified documents are attached; the stored hash is what
    verification compares delivered files against.
    """
    if not document.certified:
        raise ValueError("Only certified documents can be attached to a paystub")

    path = records.get_artifacts_dir(paystub.pay_date.year) / document.file_name
    path.write_bytes(document.content)
    try:
        return records.attach_artifact(paystub.id, path, document.sha256)
    except records.RecordNotFoundError:
        path.unlink()
        raise


async def process_payroll(
    employee_id: str,
    pay_date: date,
    hours: Any,
    rate: Any = None,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
    fmt: str = "pdf",
    profile: Optional[ProfileModel] = None,
    backend: Optional[HtmlToPdfBackend] = None,
) -> PayrollResult:
    """run_payroll() followed by render -> certify -> store for PDF formats."""
    if fmt not in ("pdf", "html-pdf"):
        raise ValueError(f"Payroll documents must be a certified PDF format, got '{fmt}'")

    result = run_payroll(
        employee_id, pay_date, hours,
        rate=rate, period_start=period_start, period_end=period_end, profile=profile,
    )
    try:
        document = await produce_document(
            result.employee, result.run, result.paystub, fmt=fmt, profile=profile, backend=backend,
        )
        result.paystub = store_document(result.paystub, document)
    except Exception as e:
        logger.error(f"Paystub document for run {result.run.id} failed, discarding run: {e}")
        discard_payroll(result)
        raise
    result.document = document
    return result


def discard_payroll(result: PayrollResult) -> None:
    """Delete a run and its paystub after their document failed."""
    records.delete_paystub(result.paystub.id)
    records.delete_payroll_run(result.run.id)


# =============================================================================
# Verification
# =============================================================================


@dataclass
class VerificationResult:
    code: str
    paystub: Optional[Paystub] = None
    employee: Optional[Employee] = None
    run: Optional[PayrollRun] = None
    hash_matches: Optional[bool] = None
    certified: Optional[bool] = None

    @property
    def found(self) -> bool:
        return self.paystub is not None


def verify_paystub(
    code: str,
    document: Optional[bytes] = None,
    profile: Optional[ProfileModel] = None,
) -> VerificationResult:
    """Resolve a verification code and optionally check a delivered file.

    When document bytes are given, hash_matches reports whether they are
    byte-identical to the stored certified artifact, and certified whether
    they carry the certification metadata.
    """
    profile = profile or ProfileModel()
    normalized = records.normalize_verification_code(code)
    result = VerificationResult(code=normalized)

    paystub = records.find_paystub_by_verification_code(normalized)
    if paystub is None:
        logger.debug(f"verification code not found: {normalized}")
        return result

    result.paystub = paystub
    result.employee = records.find_employee_by_id(paystub.employee_id)
    result.run = records.get_payroll_run(paystub.payroll_run_id)

    if document is not None:
        digest = hashlib.sha256(document).hexdigest()
        result.hash_matches = paystub.artifact_sha256 is not None and digest == paystub.artifact_sha256
        result.certified = DocumentCertifier(profile.certification).is_certified(document)

    return result
