"""NWF Pay CLI - Command-line interface for hourly payroll and paystubs."""

import click

from nwfpay import __version__

from .employee_commands import employees as employees_group
from .payroll_commands import payroll as payroll_group
from .stubs_commands import stubs as stubs_group
from .tax_commands import tax as tax_group
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="nwf-pay")
def cli():
    """NWF Pay - Hourly payroll runs and certified paystubs.

    Employees, payroll runs and paystubs are stored as JSON records in the
    data directory. Paystub PDFs are written next to them.

    Configuration is loaded from (in order):

    \b
    1. NWF_PAY_CONFIG_PATH environment variable
    2. settings.json 'profile' key
    3. ~/.config/nwf-pay/profile.yaml (XDG default)

    Run 'nwf-pay settings show' to see effective paths.
    """
    pass


cli.add_command(employees_group)
cli.add_command(payroll_group)
cli.add_command(stubs_group)
cli.add_command(tax_group)
cli.add_command(settings_group)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
