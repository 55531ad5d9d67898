"""taxes - Withholding rates and per-paycheck tax calculation.

Scope:
- Jurisdiction rate table with global defaults (policy)
- Statutory FICA rates (policy)
- Per-paycheck itemized withholding (withholding)

Constraints:
- Pure calculation - no records access, no I/O
- Receives sanitized Employee records, returns frozen value objects

Usage:
    from nwfpay.sdk.taxes import compute_taxes_for_paycheck, TaxPolicy

    taxes = compute_taxes_for_paycheck(employee, gross_pay=1000)
    rates = TaxPolicy().resolve("fl")
"""

from .policy import (
    DEFAULT_RATES,
    MEDICARE_RATE,
    SOCIAL_SECURITY_RATE,
    STATE_TAX_CONFIG,
    TaxPolicy,
    get_tax_defaults_for_state,
)

from .withholding import (
    compute_gross_pay,
    compute_taxes_for_paycheck,
    resolve_withholding,
)

__all__ = [
    # Policy
    "DEFAULT_RATES",
    "MEDICARE_RATE",
    "SOCIAL_SECURITY_RATE",
    "STATE_TAX_CONFIG",
    "TaxPolicy",
    "get_tax_defaults_for_state",
    # Withholding
    "compute_gross_pay",
    "compute_taxes_for_paycheck",
    "resolve_withholding",
]
