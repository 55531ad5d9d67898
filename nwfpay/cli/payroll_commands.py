"""Payroll CLI commands for NWF Pay.

Runs payroll for one employee and writes the certified paystub.
"""

import asyncio
import shutil
from datetime import date
from pathlib import Path

import click
from rich.console import Console

from nwfpay.sdk import (
    BackendError,
    CertificationError,
    EmployeeNotFoundError,
    PayrollInputError,
    ProfileValidationError,
    RenderError,
    accumulate,
    get_setting,
    load_profile,
    process_payroll,
    records,
    run_payroll,
    year_window,
)

from .renderers.stub_renderer import render_history, render_paystub


def load_profile_or_fail():
    """Load profile.yaml, converting validation errors to ClickException."""
    try:
        return load_profile()
    except ProfileValidationError as e:
        raise click.ClickException(str(e))


def _parse_date(value, label):
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid {label} '{value}'. Use YYYY-MM-DD.")


@click.group()
def payroll():
    """Run payroll and review payroll history."""
    pass


@payroll.command("run")
@click.argument("employee_id")
@click.option("--hours", required=True, help="Hours worked this period")
@click.option("--pay-date", required=True, help="Check date (YYYY-MM-DD)")
@click.option("--rate", default=None, help="Hourly rate override (default: employee rate)")
@click.option("--period-start", default=None, help="Period beginning (YYYY-MM-DD)")
@click.option("--period-end", default=None, help="Period ending (YYYY-MM-DD)")
@click.option("--format", "fmt", type=click.Choice(["pdf", "html-pdf"]), default=None,
              help="Document layout (default: settings 'default_format' or pdf)")
@click.option("--output", "-o", type=click.Path(), default=None,
              help="Also copy the certified PDF to this path or directory")
@click.option("--no-document", is_flag=True, help="Store the run and paystub without rendering")
def payroll_run(employee_id, hours, pay_date, rate, period_start, period_end, fmt, output, no_document):
    """Run payroll for EMPLOYEE_ID.

    Computes gross pay and itemized taxes, stores the run, recomputes YTD
    from stored history, and writes a certified paystub PDF.

    Examples:
        nwf-pay payroll run 1a2b3c4d --hours 40 --pay-date 2025-01-15
        nwf-pay payroll run 1a2b3c4d --hours 32.5 --pay-date 2025-01-31 --rate 22 --format html-pdf
    """
    profile = load_profile_or_fail()
    pay_date = _parse_date(pay_date, "pay date")
    period_start = _parse_date(period_start, "period start")
    period_end = _parse_date(period_end, "period end")
    fmt = fmt or get_setting("default_format") or "pdf"

    try:
        if no_document:
            result = run_payroll(
                employee_id, pay_date, hours,
                rate=rate, period_start=period_start, period_end=period_end, profile=profile,
            )
        else:
            result = asyncio.run(process_payroll(
                employee_id, pay_date, hours,
                rate=rate, period_start=period_start, period_end=period_end,
                fmt=fmt, profile=profile,
            ))
    except EmployeeNotFoundError as e:
        raise click.ClickException(str(e))
    except PayrollInputError as e:
        raise click.ClickException(f"Invalid payroll input: {e}")
    except (RenderError, BackendError, CertificationError) as e:
        raise click.ClickException(f"Paystub document failed: {e}")

    warnings = []
    if result.run.net_pay < 0:
        warnings.append("Net pay is negative: withholding exceeds gross pay.")

    render_paystub(Console(), result.employee, result.run, result.paystub, warnings=warnings)

    if result.paystub.artifact_path:
        click.echo(f"Certified paystub: {result.paystub.artifact_path}")
        if output:
            dest = Path(output).expanduser()
            if dest.is_dir():
                dest = dest / result.paystub.file_name
            shutil.copyfile(result.paystub.artifact_path, dest)
            click.echo(f"Copied to: {dest}")


@payroll.command("history")
@click.argument("employee_id")
@click.option("--year", type=int, default=None, help="Calendar year (default: current year)")
def payroll_history(employee_id, year):
    """List payroll runs for EMPLOYEE_ID with year-to-date totals."""
    employee = records.find_employee_by_id(employee_id)
    if employee is None:
        raise click.ClickException(f"Employee not found: {employee_id}")

    today = date.today()
    as_of = today if year is None or year == today.year else date(year, 12, 31)
    runs = records.find_payroll_runs_for_employee(employee.id, *year_window(as_of))
    if not runs:
        click.echo(f"No payroll runs for {employee.full_name} in {as_of.year}.")
        return

    ytd = accumulate(runs, as_of, employee_id=employee.id)
    render_history(Console(), runs, ytd, title=f"{employee.full_name} - {as_of.year}")
