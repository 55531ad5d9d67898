"""Pydantic schemas for NWF Pay records and configuration.

Payroll records (Employee, PayrollRun, Paystub) are frozen value objects:
storage writes them, the rest of the SDK only reads them and derives new
records with model_copy(). Numeric fields pass through safe_number() once,
here, so calculation code never has to guard against bad input.

Profile schemas use extra='forbid' to reject unknown fields, ensuring
typos in profile.yaml cause clear errors rather than silent ignoring.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator


def safe_number(value: Any) -> float:
    """Coerce a value to float, treating anything non-numeric as 0.

    Accepts ints, floats, Decimals and numeric strings ("12.5", " 40 ").
    None, empty strings, booleans, NaN/inf and unparseable strings give 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _optional_number(value: Any) -> Optional[float]:
    """Like safe_number, but keeps unset values (None, "") as None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return safe_number(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


Money = Annotated[float, BeforeValidator(safe_number)]
OptionalRate = Annotated[Optional[float], BeforeValidator(_optional_number)]
Text = Annotated[str, BeforeValidator(_text)]

PayFrequency = Literal["weekly", "biweekly", "semimonthly", "monthly"]
PayType = Literal["hourly", "salary"]


# =============================================================================
# Employee
# =============================================================================


class Address(BaseModel):
    """Mailing address. Every line is optional and defaults to ''."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    line1: Text = ""
    line2: Text = ""
    city: Text = ""
    state: Text = ""
    zip: Text = ""


class DirectDeposit(BaseModel):
    """Bank details shown (masked) on the paystub."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    account_type: Text = "Checking"
    bank_name: Text = ""
    routing_number: Text = ""
    account_number_last4: Text = ""


class Employee(BaseModel):
    """Identity and payroll policy for one hourly employee."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    first_name: Text = ""
    middle_name: Text = ""
    last_name: Text = ""
    email: Text = ""
    phone: Text = ""
    external_employee_id: Text = ""
    company_name: Text = ""
    address: Address = Field(default_factory=Address)
    direct_deposit: DirectDeposit = Field(default_factory=DirectDeposit)

    pay_method: Literal["direct_deposit", "check"] = "direct_deposit"
    pay_type: PayType = "hourly"
    pay_frequency: PayFrequency = "biweekly"
    hourly_rate: Money = 0.0
    hire_date: Optional[date] = None

    # Withholding configuration. Unset rates fall back to the TaxPolicy
    # default for the employee's jurisdiction.
    state_code: Text = ""
    federal_withholding_rate: OptionalRate = None
    state_withholding_rate: OptionalRate = None
    extra_withholding_federal: Money = 0.0
    extra_withholding_state: Money = 0.0
    exempt_federal: bool = False
    exempt_state: bool = False

    @field_validator("address", "direct_deposit", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def full_name(self) -> str:
        return " ".join(p for p in [self.first_name, self.last_name] if p)

    @property
    def jurisdiction(self) -> str:
        """Jurisdiction code: state_code, else the mailing address state."""
        return self.state_code or self.address.state


# =============================================================================
# Tax and YTD value records
# =============================================================================


class JurisdictionRates(BaseModel):
    """Resolved withholding rates for one jurisdiction."""

    model_config = ConfigDict(frozen=True)

    federal_rate: float
    state_rate: float


class TaxBreakdown(BaseModel):
    """Itemized taxes for a single paycheck. Values are unrounded."""

    model_config = ConfigDict(frozen=True)

    federal_income_tax: float = 0.0
    state_income_tax: float = 0.0
    social_security: float = 0.0
    medicare: float = 0.0
    total_taxes: float = 0.0
    net_pay: float = 0.0


class YtdTotals(BaseModel):
    """Calendar-year cumulative totals through a pay date."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    gross: Money = 0.0
    net: Money = 0.0
    federal_income_tax: Money = 0.0
    state_income_tax: Money = 0.0
    social_security: Money = 0.0
    medicare: Money = 0.0

    @property
    def total_taxes(self) -> float:
        return (
            self.federal_income_tax
            + self.state_income_tax
            + self.social_security
            + self.medicare
        )


# =============================================================================
# Payroll records
# =============================================================================


class PayrollRun(BaseModel):
    """One computed paycheck. Immutable; corrections are new runs."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    employee_id: str
    pay_type: PayType = "hourly"
    pay_frequency: PayFrequency = "biweekly"
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    pay_date: date

    hours_worked: Money = 0.0
    hourly_rate: Money = 0.0
    gross_pay: Money = 0.0
    federal_income_tax: Money = 0.0
    state_income_tax: Money = 0.0
    social_security: Money = 0.0
    medicare: Money = 0.0
    total_taxes: Money = 0.0
    net_pay: Money = 0.0

    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_period(self) -> "PayrollRun":
        if self.period_start and self.period_end and self.period_start > self.period_end:
            raise ValueError(
                f"period_start {self.period_start} is after period_end {self.period_end}"
            )
        return self


class Paystub(BaseModel):
    """Document record tied 1:1 to a PayrollRun.

    The YTD snapshot is frozen at creation. Only the rendered artifact
    pointer and its hash are attached afterwards.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    employee_id: str
    payroll_run_id: str
    pay_date: date
    file_name: str
    verification_code: Optional[str] = None
    ytd: YtdTotals = Field(default_factory=YtdTotals)
    artifact_path: Optional[str] = None
    artifact_sha256: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# Profile (profile.yaml)
# =============================================================================


class EmployerProfile(BaseModel):
    """Company block printed at the top of each stub."""
    model_config = ConfigDict(extra="forbid")

    name: str = "NWF PAYROLL SERVICES"
    address_line1: str = ""
    address_line2: str = ""


class CertificationProfile(BaseModel):
    """Document metadata stamped by the certifier."""
    model_config = ConfigDict(extra="forbid")

    creator: str = "NWF Payroll Certified Document System v2025"
    producer: str = "NWF Payroll Certified Document System v2025"
    author: str = "NWF Payroll Services"
    title: str = "Official Paystub Verification Document"


class VerificationProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_url: str = "https://nwf-payroll-backend.onrender.com/api/verify-paystub"


class DocumentsProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_prefix: str = Field(default="nwf", min_length=1)
    copies: int = Field(default=2, ge=1, le=2, description="Stub copies per PDF page")


class JurisdictionOverride(BaseModel):
    """Partial rate override; unset fields inherit the default."""
    model_config = ConfigDict(extra="forbid")

    federal_rate: Optional[float] = Field(default=None, ge=0, le=1)
    state_rate: Optional[float] = Field(default=None, ge=0, le=1)


class TaxProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default: Optional[JurisdictionOverride] = None
    jurisdictions: Dict[str, JurisdictionOverride] = Field(default_factory=dict)


class ProfileModel(BaseModel):
    """Complete profile.yaml. Every section is optional."""
    model_config = ConfigDict(extra="forbid")

    employer: EmployerProfile = Field(default_factory=EmployerProfile)
    certification: CertificationProfile = Field(default_factory=CertificationProfile)
    verification: VerificationProfile = Field(default_factory=VerificationProfile)
    documents: DocumentsProfile = Field(default_factory=DocumentsProfile)
    tax: TaxProfile = Field(default_factory=TaxProfile)
