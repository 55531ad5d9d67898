"""Withholding rate policy by jurisdiction.

Flat-percentage placeholders, not tax law: each jurisdiction may override
the federal rate, the state rate, or both, and anything it leaves unset is
inherited from DEFAULT_RATES. Statutory FICA rates live here too so every
rate the calculator applies can be reviewed in one place.
"""

from typing import Dict, Mapping, Optional

from ..schemas import JurisdictionOverride, JurisdictionRates, TaxProfile

# Employee-side FICA. Statutory, not configurable per employee.
SOCIAL_SECURITY_RATE = 0.062   # 6.2%
MEDICARE_RATE = 0.0145         # 1.45%

DEFAULT_RATES = JurisdictionRates(
    federal_rate=0.18,  # 18% default federal withholding
    state_rate=0.05,    # 5% default state tax
)

STATE_TAX_CONFIG: Dict[str, JurisdictionOverride] = {
    # No state income tax
    "FL": JurisdictionOverride(state_rate=0.0),  # Florida
    "TX": JurisdictionOverride(state_rate=0.0),  # Texas
    "WA": JurisdictionOverride(state_rate=0.0),  # Washington
    "NV": JurisdictionOverride(state_rate=0.0),  # Nevada
    "WY": JurisdictionOverride(state_rate=0.0),  # Wyoming
    "SD": JurisdictionOverride(state_rate=0.0),  # South Dakota
    "TN": JurisdictionOverride(state_rate=0.0),  # Tennessee
    "AK": JurisdictionOverride(state_rate=0.0),  # Alaska

    "GA": JurisdictionOverride(state_rate=0.05),  # Georgia
}


def normalize_code(code: Optional[str]) -> str:
    """Normalize a jurisdiction code for lookup ('fl ' -> 'FL')."""
    return (code or "").strip().upper()


class TaxPolicy:
    """Resolves federal/state withholding rates for a jurisdiction code.

    Pure lookup: resolve() has no error path and always returns rates.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, JurisdictionOverride]] = None,
        default: JurisdictionRates = DEFAULT_RATES,
    ):
        table = STATE_TAX_CONFIG if overrides is None else overrides
        self.default = default
        self.overrides = {normalize_code(code): entry for code, entry in table.items()}

    @classmethod
    def from_profile(cls, tax: Optional[TaxProfile]) -> "TaxPolicy":
        """Build a policy from the profile's tax section.

        Profile jurisdictions are layered over the built-in table, and a
        profile default replaces only the fields it sets.
        """
        if tax is None:
            return cls()

        default = DEFAULT_RATES
        if tax.default is not None:
            default = _merge(tax.default, DEFAULT_RATES)

        table = dict(STATE_TAX_CONFIG)
        for code, entry in tax.jurisdictions.items():
            table[normalize_code(code)] = entry

        return cls(overrides=table, default=default)

    def resolve(self, jurisdiction_code: Optional[str]) -> JurisdictionRates:
        """Return the rates for a jurisdiction, defaulting unknown codes."""
        code = normalize_code(jurisdiction_code)
        entry = self.overrides.get(code) if code else None
        if entry is None:
            return self.default
        return _merge(entry, self.default)


def _merge(entry: JurisdictionOverride, base: JurisdictionRates) -> JurisdictionRates:
    return JurisdictionRates(
        federal_rate=entry.federal_rate if entry.federal_rate is not None else base.federal_rate,
        state_rate=entry.state_rate if entry.state_rate is not None else base.state_rate,
    )


def get_tax_defaults_for_state(state_code: Optional[str]) -> JurisdictionRates:
    """Resolve rates against the built-in table."""
    return TaxPolicy().resolve(state_code)
