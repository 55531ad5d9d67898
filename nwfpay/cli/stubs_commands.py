"""Stubs command group for paystub documents and the year-end W-2."""

import asyncio
from datetime import date
from pathlib import Path

import click

from nwfpay.sdk import (
    DOCUMENT_FORMATS,
    BackendError,
    CertificationError,
    EmployeeNotFoundError,
    RenderError,
    build_wage_statement,
    produce_document,
    produce_wage_statement,
    records,
    verify_paystub,
)

from .payroll_commands import load_profile_or_fail


@click.group()
def stubs():
    """Render, list and verify paystubs."""
    pass


@stubs.command("render")
@click.argument("paystub_id")
@click.option("--format", "fmt", type=click.Choice(list(DOCUMENT_FORMATS)), default="pdf")
@click.option("--output", "-o", type=click.Path(), default=None,
              help="Output file or directory (default: current directory)")
def stubs_render(paystub_id, fmt, output):
    """Re-render a stored paystub.

    The document is rebuilt from the stored run and the paystub's YTD
    snapshot, so amounts never change. PDF formats are certified; the
    stored artifact is left untouched.
    """
    profile = load_profile_or_fail()

    paystub = records.get_paystub(paystub_id)
    if paystub is None:
        raise click.ClickException(f"Paystub not found: {paystub_id}")
    run = records.get_payroll_run(paystub.payroll_run_id)
    employee = records.find_employee_by_id(paystub.employee_id)
    if run is None or employee is None:
        raise click.ClickException(f"Paystub {paystub_id} references missing records")

    try:
        document = asyncio.run(produce_document(employee, run, paystub, fmt=fmt, profile=profile))
    except (RenderError, BackendError, CertificationError) as e:
        raise click.ClickException(f"Paystub document failed: {e}")

    dest = Path(output).expanduser() if output else Path.cwd()
    if dest.is_dir():
        dest = dest / document.file_name
    dest.write_bytes(document.content)

    status = "certified" if document.certified else "not certified"
    click.echo(f"Wrote {dest} ({document.content_type}, {status})")


@stubs.command("list")
@click.argument("employee_id")
def stubs_list(employee_id):
    """List paystubs for EMPLOYEE_ID."""
    paystubs = records.list_paystubs(employee_id)
    if not paystubs:
        click.echo("No paystubs found.")
        return

    click.echo(f"{'Pay Date':<12} {'Paystub ID':<34} {'Code':<12} {'YTD Gross':>12} {'YTD Net':>12}")
    click.echo("-" * 86)
    for stub in paystubs:
        click.echo(
            f"{stub.pay_date.isoformat():<12} {stub.id:<34} {stub.verification_code or '-':<12} "
            f"{stub.ytd.gross:>12,.2f} {stub.ytd.net:>12,.2f}"
        )
    click.echo(f"\n{len(paystubs)} paystub(s)")


@stubs.command("verify")
@click.argument("code")
@click.option("--file", "file_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Delivered PDF to compare against the stored artifact")
def stubs_verify(code, file_path):
    """Look up a paystub by its verification CODE.

    With --file, also checks that the document is byte-identical to the
    stored certified artifact. Exits non-zero when verification fails.
    """
    document = Path(file_path).read_bytes() if file_path else None
    result = verify_paystub(code, document=document, profile=load_profile_or_fail())

    if not result.found:
        raise click.ClickException(f"No paystub found for verification code {result.code}")

    stub = result.paystub
    click.echo(f"Verification code: {result.code}")
    click.echo(f"Paystub: {stub.id}")
    if result.employee:
        click.echo(f"Employee: {result.employee.full_name}")
    click.echo(f"Pay date: {stub.pay_date.isoformat()}")
    if result.run:
        click.echo(f"Gross: {result.run.gross_pay:,.2f}  Net: {result.run.net_pay:,.2f}")

    if document is None:
        return

    click.echo(f"Certified metadata: {'yes' if result.certified else 'no'}")
    if result.hash_matches:
        click.echo(click.style("Document matches the issued paystub.", fg="green"))
    else:
        raise click.ClickException("Document does NOT match the issued paystub")


@stubs.command("w2")
@click.argument("employee_id")
@click.option("--year", type=int, default=None, help="Tax year (default: current year)")
@click.option("--output", "-o", type=click.Path(), default=None,
              help="Output file or directory (default: current directory)")
def stubs_w2(employee_id, year, output):
    """Write the certified W-2 wage statement for EMPLOYEE_ID.

    Box values are the totals of every payroll run paid in the year.
    """
    profile = load_profile_or_fail()
    year = year or date.today().year
    if not 1900 <= year <= 9999:
        raise click.ClickException(f"Invalid year: {year}")

    try:
        statement = build_wage_statement(employee_id, year)
        document = asyncio.run(produce_wage_statement(statement, profile))
    except EmployeeNotFoundError:
        raise click.ClickException(f"Employee not found: {employee_id}")
    except (RenderError, CertificationError) as e:
        raise click.ClickException(f"W-2 document failed: {e}")

    if statement.run_count == 0:
        click.echo(click.style(f"Warning: no payroll runs paid in {year}", fg="yellow"), err=True)

    dest = Path(output).expanduser() if output else Path.cwd()
    if dest.is_dir():
        dest = dest / document.file_name
    dest.write_bytes(document.content)

    boxes = statement.boxes
    click.echo(f"Wages (box 1): {boxes['wages']:,.2f}  Federal withheld (box 2): {boxes['federal_tax_withheld']:,.2f}")
    click.echo(f"Wrote {dest} (certified W-2, {statement.run_count} payroll run(s))")
