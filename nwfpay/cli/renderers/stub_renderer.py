"""Rich renderer for payroll runs and paystubs.

Transforms SDK records into formatted Rich tables.
"""

from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from nwfpay.sdk import Employee, PayrollRun, Paystub, YtdTotals


def render_paystub(
    console: Console,
    employee: Employee,
    run: PayrollRun,
    paystub: Paystub,
    warnings: Optional[Iterable[str]] = None,
) -> None:
    """Render one payroll run with its paystub YTD snapshot.

    Args:
        console: Rich Console instance
        employee: Employee the run was computed for
        run: Stored payroll run
        paystub: Paystub record (carries the YTD snapshot)
        warnings: Optional notes printed above the table
    """
    for warning in warnings or []:
        console.print(Panel(
            f"[yellow]{warning}[/yellow]",
            title="Note",
            border_style="yellow"
        ))

    _render_header(console, employee, run, paystub)
    _render_stub_table(console, run, paystub.ytd)


def _render_header(console: Console, employee: Employee, run: PayrollRun, paystub: Paystub) -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")

    period = f"{run.period_start or '-'} .. {run.period_end or '-'}"
    table.add_row("Employee", f"{employee.full_name} ({employee.id})")
    table.add_row("Pay Date", str(run.pay_date))
    table.add_row("Period", period)
    table.add_row("Frequency", run.pay_frequency)
    table.add_row("Verification", f"[cyan]{paystub.verification_code}[/cyan]")
    if paystub.artifact_path:
        table.add_row("Document", paystub.artifact_path)

    console.print(Panel(table, title=f"Paystub {paystub.id}", border_style="dim"))


def _render_stub_table(console: Console, run: PayrollRun, ytd: YtdTotals) -> None:
    table = Table(title=f"Pay Stub: {run.pay_date}", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=25)
    table.add_column("Current", justify="right", min_width=12)
    table.add_column("YTD", justify="right", min_width=12)

    table.add_row("[bold]EARNINGS[/bold]", "", "")
    table.add_row(
        f"  Regular ({run.hours_worked:g} h @ {_fmt(run.hourly_rate)})",
        _fmt(run.gross_pay),
        _fmt(ytd.gross),
    )
    table.add_row("", "", "")

    table.add_row("[bold]TAXES[/bold]", "", "")
    table.add_row("  Federal Income Tax", _fmt(run.federal_income_tax), _fmt(ytd.federal_income_tax))
    table.add_row("  State Income Tax", _fmt(run.state_income_tax), _fmt(ytd.state_income_tax))
    table.add_row("  Social Security", _fmt(run.social_security), _fmt(ytd.social_security))
    table.add_row("  Medicare", _fmt(run.medicare), _fmt(ytd.medicare))
    table.add_row(
        "  [dim]Total Taxes[/dim]",
        f"[dim]{_fmt(run.total_taxes)}[/dim]",
        f"[dim]{_fmt(ytd.total_taxes)}[/dim]",
    )
    table.add_row("", "", "")

    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(run.net_pay)}[/bold green]",
        _fmt(ytd.net),
    )

    console.print(table)


def render_history(console: Console, runs: Iterable[PayrollRun], ytd: YtdTotals, title: str) -> None:
    """Render a list of payroll runs followed by their YTD totals."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Pay Date")
    table.add_column("Run ID", style="dim")
    table.add_column("Hours", justify="right")
    table.add_column("Gross", justify="right")
    table.add_column("Taxes", justify="right")
    table.add_column("Net", justify="right")

    for run in runs:
        table.add_row(
            str(run.pay_date),
            run.id,
            f"{run.hours_worked:g}",
            _fmt(run.gross_pay),
            _fmt(run.total_taxes),
            _fmt(run.net_pay),
        )

    table.add_section()
    table.add_row("[bold]YTD[/bold]", "", "", _fmt(ytd.gross), _fmt(ytd.total_taxes), _fmt(ytd.net))
    console.print(table)


def _fmt(amount: float | None) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"${amount:,.2f}"
