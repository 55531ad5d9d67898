"""Tax CLI commands for NWF Pay."""

import click
from rich.console import Console
from rich.table import Table
from rich import box

from nwfpay.sdk import TaxPolicy
from nwfpay.sdk.taxes import MEDICARE_RATE, SOCIAL_SECURITY_RATE

from .payroll_commands import load_profile_or_fail


@click.group()
def tax():
    """Inspect withholding rates."""
    pass


@tax.command("rates")
@click.argument("code", required=False)
def tax_rates(code):
    """Show resolved withholding rates.

    With CODE, shows the rates for that jurisdiction (unknown codes use
    the default). Without it, lists every configured jurisdiction.
    """
    profile = load_profile_or_fail()
    policy = TaxPolicy.from_profile(profile.tax)

    table = Table(title="Withholding Rates", box=box.ROUNDED)
    table.add_column("Jurisdiction")
    table.add_column("Federal", justify="right")
    table.add_column("State", justify="right")

    if code:
        codes = [code.strip().upper()]
    else:
        codes = sorted(policy.overrides)
        rates = policy.default
        table.add_row("[dim](default)[/dim]", f"{rates.federal_rate:.2%}", f"{rates.state_rate:.2%}")

    for c in codes:
        rates = policy.resolve(c)
        table.add_row(c, f"{rates.federal_rate:.2%}", f"{rates.state_rate:.2%}")

    console = Console()
    console.print(table)
    console.print(
        f"[dim]Social Security {SOCIAL_SECURITY_RATE:.2%}, Medicare {MEDICARE_RATE:.2%} (all jurisdictions)[/dim]"
    )
