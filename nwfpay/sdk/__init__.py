"""NWF Pay SDK - Core functionality for hourly payroll and paystubs."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    load_profile_data,
    get_data_path,
    ProfileValidationError,
)

from .schemas import (
    Address,
    DirectDeposit,
    Employee,
    JurisdictionRates,
    PayrollRun,
    Paystub,
    ProfileModel,
    TaxBreakdown,
    YtdTotals,
    safe_number,
)

from .taxes import (
    TaxPolicy,
    compute_gross_pay,
    compute_taxes_for_paycheck,
    get_tax_defaults_for_state,
)

from .ytd import accumulate, year_window

from .records import RecordNotFoundError, EmployeeNotFoundError

from .rendering import (
    PaystubRenderer,
    RenderError,
    ReportLabPaystubRenderer,
    HtmlPaystubRenderer,
    get_renderer,
)

from .backends import BackendError, ChromiumBackend, PageOptions, find_browser

from .certify import CertificationError, DocumentCertifier, read_metadata

from .payroll import (
    DOCUMENT_FORMATS,
    PayrollInputError,
    PayrollResult,
    PaystubDocument,
    VerificationResult,
    build_file_name,
    process_payroll,
    produce_document,
    run_payroll,
    store_document,
    verify_paystub,
)

from .w2 import WageStatement, build_w2_file_name, build_wage_statement, produce_wage_statement

from . import records

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "load_profile_data",
    "get_data_path",
    "ProfileValidationError",
    # Schemas
    "Address",
    "DirectDeposit",
    "Employee",
    "JurisdictionRates",
    "PayrollRun",
    "Paystub",
    "ProfileModel",
    "TaxBreakdown",
    "YtdTotals",
    "safe_number",
    # Taxes
    "TaxPolicy",
    "compute_gross_pay",
    "compute_taxes_for_paycheck",
    "get_tax_defaults_for_state",
    # YTD
    "accumulate",
    "year_window",
    # Records
    "records",
    "RecordNotFoundError",
    "EmployeeNotFoundError",
    # Rendering
    "PaystubRenderer",
    "RenderError",
    "ReportLabPaystubRenderer",
    "HtmlPaystubRenderer",
    "get_renderer",
    # Backends
    "BackendError",
    "ChromiumBackend",
    "PageOptions",
    "find_browser",
    # Certification
    "CertificationError",
    "DocumentCertifier",
    "read_metadata",
    # Payroll
    "DOCUMENT_FORMATS",
    "PayrollInputError",
    "PayrollResult",
    "PaystubDocument",
    "VerificationResult",
    "build_file_name",
    "process_payroll",
    "produce_document",
    "run_payroll",
    "store_document",
    "verify_paystub",
    # W-2
    "WageStatement",
    "build_w2_file_name",
    "build_wage_statement",
    "produce_wage_statement",
]
