"""Year-to-date aggregation over payroll run history.

YTD covers January 1 of the as-of date's year through the as-of date,
inclusive. Totals are recomputed from history on every call; nothing is
cached, so the only requirement for correctness is that the history read
already contains the current run.
"""

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from .schemas import PayrollRun, YtdTotals, safe_number

logger = logging.getLogger(__name__)

RunLike = Union[PayrollRun, Mapping[str, Any]]

# YtdTotals field -> PayrollRun field
YTD_FIELDS = {
    "gross": "gross_pay",
    "net": "net_pay",
    "federal_income_tax": "federal_income_tax",
    "state_income_tax": "state_income_tax",
    "social_security": "social_security",
    "medicare": "medicare",
}


def year_window(as_of_date: date) -> Tuple[date, date]:
    """Return (Jan 1 of as_of_date's year, as_of_date).

    A datetime is reduced to its calendar date so both bounds compare
    against stored pay dates.
    """
    if isinstance(as_of_date, datetime):
        as_of_date = as_of_date.date()
    return date(as_of_date.year, 1, 1), as_of_date


def _get(run: RunLike, name: str) -> Any:
    if isinstance(run, Mapping):
        return run.get(name)
    return getattr(run, name, None)


def _pay_date(run: RunLike) -> Optional[date]:
    value = _get(run, "pay_date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def accumulate(
    runs: Iterable[RunLike],
    as_of_date: date,
    employee_id: Optional[str] = None,
) -> YtdTotals:
    """Sum payroll runs paid within the calendar year through as_of_date.

    Args:
        runs: PayrollRun records (or plain dicts with the same keys), in
            storage order. Summation follows this order.
        as_of_date: Pay date the totals are "as of" (inclusive)
        employee_id: If given, runs for other employees are ignored

    Returns:
        YtdTotals. Missing or non-numeric fields on a run count as 0, and
        an empty history yields all zeros.
    """
    start, end = year_window(as_of_date)
    sums = {key: 0.0 for key in YTD_FIELDS}
    included = 0

    for run in runs:
        if employee_id is not None and _get(run, "employee_id") != employee_id:
            continue

        pay_date = _pay_date(run)
        if pay_date is None:
            logger.debug(f"ytd: skipping run {_get(run, 'id')} without pay_date")
            continue
        if not (start <= pay_date <= end):
            continue

        for key, field in YTD_FIELDS.items():
            sums[key] += safe_number(_get(run, field))
        included += 1

    logger.debug(f"ytd: {included} run(s) in {start}..{end}, gross {sums['gross']:.2f}")
    return YtdTotals(**sums)
