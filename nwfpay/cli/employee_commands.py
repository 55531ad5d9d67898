"""Employee CLI commands for NWF Pay.

Manages employee records - identity, pay rate, withholding configuration.
"""

import json

import click
from pydantic import ValidationError

from nwfpay.sdk import records


@click.group()
def employees():
    """Manage employee records."""
    pass


@employees.command("add")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--email", default="", help="Email; also derives a stable employee ID")
@click.option("--rate", "hourly_rate", type=float, default=0.0, help="Default hourly rate")
@click.option("--state", "state_code", default="", help="Jurisdiction code (e.g. FL, GA)")
@click.option("--frequency", "pay_frequency", default="biweekly",
              type=click.Choice(["weekly", "biweekly", "semimonthly", "monthly"]))
@click.option("--external-id", "external_employee_id", default="", help="Employer-assigned ID shown on stubs")
@click.option("--company", "company_name", default="", help="Company name override for this employee")
@click.option("--federal-rate", type=float, default=None, help="Federal withholding rate (e.g. 0.12)")
@click.option("--state-rate", type=float, default=None, help="State withholding rate (e.g. 0.04)")
@click.option("--exempt-federal", is_flag=True)
@click.option("--exempt-state", is_flag=True)
@click.option("--extra-federal", type=float, default=0.0, help="Flat federal add-on per paycheck")
@click.option("--extra-state", type=float, default=0.0, help="Flat state add-on per paycheck")
@click.option("--address-line1", default="")
@click.option("--address-line2", default="")
@click.option("--city", default="")
@click.option("--address-state", default="", help="Mailing address state")
@click.option("--zip", "zip_code", default="")
@click.option("--bank-name", default="", help="Direct deposit bank")
@click.option("--account-type", default="Checking")
@click.option("--routing-number", default="")
@click.option("--account-last4", default="", help="Last four digits of the deposit account")
def employees_add(first_name, last_name, email, hourly_rate, state_code, pay_frequency,
                  external_employee_id, company_name, federal_rate, state_rate,
                  exempt_federal, exempt_state, extra_federal, extra_state,
                  address_line1, address_line2, city, address_state, zip_code,
                  bank_name, account_type, routing_number, account_last4):
    """Add or replace an employee.

    Re-adding with the same email replaces the existing record.

    Example:
        nwf-pay employees add --first-name Ada --last-name Lovelace --email ada@example.com --rate 25 --state FL
    """
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "hourly_rate": hourly_rate,
        "state_code": state_code.upper(),
        "pay_frequency": pay_frequency,
        "external_employee_id": external_employee_id,
        "company_name": company_name,
        "federal_withholding_rate": federal_rate,
        "state_withholding_rate": state_rate,
        "exempt_federal": exempt_federal,
        "exempt_state": exempt_state,
        "extra_withholding_federal": extra_federal,
        "extra_withholding_state": extra_state,
        "address": {
            "line1": address_line1,
            "line2": address_line2,
            "city": city,
            "state": address_state.upper(),
            "zip": zip_code,
        },
        "direct_deposit": {
            "account_type": account_type,
            "bank_name": bank_name,
            "routing_number": routing_number,
            "account_number_last4": account_last4[-4:],
        },
    }
    try:
        employee = records.save_employee(data)
    except ValidationError as e:
        raise click.ClickException(f"Invalid employee: {e}")

    click.echo(f"Saved employee {employee.id}: {employee.full_name}")


@employees.command("list")
def employees_list():
    """List all employees."""
    all_employees = records.list_employees()
    if not all_employees:
        click.echo("No employees found.")
        return

    click.echo(f"{'ID':<34} {'Name':<28} {'State':<6} {'Rate':>10}")
    click.echo("-" * 80)
    for emp in all_employees:
        click.echo(f"{emp.id:<34} {emp.full_name:<28} {emp.jurisdiction or '-':<6} {emp.hourly_rate:>10.2f}")
    click.echo(f"\n{len(all_employees)} employee(s)")


@employees.command("show")
@click.argument("employee_id")
def employees_show(employee_id):
    """Show an employee record as JSON."""
    employee = records.find_employee_by_id(employee_id)
    if employee is None:
        raise click.ClickException(f"Employee not found: {employee_id}")
    click.echo(json.dumps(employee.model_dump(mode="json"), indent=2))
