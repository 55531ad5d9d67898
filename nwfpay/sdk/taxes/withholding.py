"""Per-paycheck tax withholding.

Turns an employee's withholding configuration and a gross amount into an
itemized TaxBreakdown. Nothing is rounded here: cents rounding is a
display concern and happens only when a paystub is rendered.
"""

import logging
from typing import Any, Optional, Tuple

from ..schemas import Employee, TaxBreakdown, safe_number
from .policy import MEDICARE_RATE, SOCIAL_SECURITY_RATE, TaxPolicy

logger = logging.getLogger(__name__)


def compute_gross_pay(hours: Any, rate: Any) -> float:
    """Gross pay = hours x hourly rate, with bad input treated as 0."""
    return safe_number(hours) * safe_number(rate)


def resolve_withholding(
    employee: Employee,
    policy: Optional[TaxPolicy] = None,
) -> Tuple[float, float, float, float]:
    """Effective (federal_rate, extra_federal, state_rate, extra_state).

    An exemption zeroes both the rate and the flat add-on for that tax
    type only. Unset employee rates fall back to the policy for the
    employee's jurisdiction.
    """
    policy = policy or TaxPolicy()
    defaults = policy.resolve(employee.jurisdiction)

    if employee.exempt_federal:
        federal_rate, extra_federal = 0.0, 0.0
    else:
        federal_rate = employee.federal_withholding_rate
        if federal_rate is None:
            federal_rate = defaults.federal_rate
        extra_federal = employee.extra_withholding_federal

    if employee.exempt_state:
        state_rate, extra_state = 0.0, 0.0
    else:
        state_rate = employee.state_withholding_rate
        if state_rate is None:
            state_rate = defaults.state_rate
        extra_state = employee.extra_withholding_state

    return federal_rate, extra_federal, state_rate, extra_state


def compute_taxes_for_paycheck(
    employee: Employee,
    gross_pay: Any,
    policy: Optional[TaxPolicy] = None,
) -> TaxBreakdown:
    """Compute taxes for a single paycheck.

    Args:
        employee: Employee whose withholding settings apply
        gross_pay: Gross amount for the check; non-numeric input counts as 0
        policy: Rate policy for unset employee rates (built-in table if None)

    Returns:
        TaxBreakdown with federal, state, social security and medicare
        lines, their total, and net pay. Net pay is not floored and may be
        negative when flat add-ons exceed the check.
    """
    gross = safe_number(gross_pay)
    federal_rate, extra_federal, state_rate, extra_state = resolve_withholding(employee, policy)

    federal_income_tax = gross * federal_rate + extra_federal
    state_income_tax = gross * state_rate + extra_state

    social_security = gross * SOCIAL_SECURITY_RATE
    medicare = gross * MEDICARE_RATE

    total_taxes = federal_income_tax + state_income_tax + social_security + medicare
    net_pay = gross - total_taxes

    if net_pay < 0:
        logger.warning(
            f"Negative net pay for employee {employee.id}: "
            f"gross {gross:.2f}, taxes {total_taxes:.2f}"
        )

    return TaxBreakdown(
        federal_income_tax=federal_income_tax,
        state_income_tax=state_income_tax,
        social_security=social_security,
        medicare=medicare,
        total_taxes=total_taxes,
        net_pay=net_pay,
    )
