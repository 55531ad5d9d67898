"""NWF Pay MCP Server - FastMCP implementation for payroll tools."""

import base64
import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from nwfpay.sdk import (
    TaxPolicy,
    load_profile,
    process_payroll,
    records as sdk_records,
    verify_paystub as sdk_verify_paystub,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("nwf-pay")


def _paystub_summary(paystub, run=None) -> dict[str, Any]:
    summary = {
        "paystub_id": paystub.id,
        "employee_id": paystub.employee_id,
        "pay_date": paystub.pay_date.isoformat(),
        "verification_code": paystub.verification_code,
        "file_name": paystub.file_name,
        "artifact_path": paystub.artifact_path,
        "artifact_sha256": paystub.artifact_sha256,
        "ytd": paystub.ytd.model_dump(),
    }
    if run is not None:
        summary["current"] = {
            "hours_worked": run.hours_worked,
            "hourly_rate": run.hourly_rate,
            "gross_pay": run.gross_pay,
            "federal_income_tax": run.federal_income_tax,
            "state_income_tax": run.state_income_tax,
            "social_security": run.social_security,
            "medicare": run.medicare,
            "total_taxes": run.total_taxes,
            "net_pay": run.net_pay,
        }
    return summary


# --- Tools ---

@mcp.tool()
async def run_payroll(
    employee_id: str = Field(description="Employee record ID"),
    hours: float = Field(description="Hours worked this period"),
    pay_date: str = Field(description="Check date (YYYY-MM-DD)"),
    rate: float | None = Field(default=None, description="Hourly rate override (default: employee rate)"),
    period_start: str | None = Field(default=None, description="Period beginning (YYYY-MM-DD)"),
    period_end: str | None = Field(default=None, description="Period ending (YYYY-MM-DD)"),
    format: str = Field(default="pdf", description="Document layout: 'pdf' or 'html-pdf'"),
) -> dict[str, Any]:
    """Run payroll for one employee. Stores the run, computes YTD, and writes a certified paystub PDF."""
    try:
        result = await process_payroll(
            employee_id,
            date.fromisoformat(pay_date),
            hours,
            rate=rate,
            period_start=date.fromisoformat(period_start) if period_start else None,
            period_end=date.fromisoformat(period_end) if period_end else None,
            fmt=format,
            profile=load_profile(),
        )
        return {"paystub": _paystub_summary(result.paystub, result.run), "payroll_run_id": result.run.id}

    except Exception as e:
        logger.error(f"Error running payroll for {employee_id}: {e}")
        return {"error": str(e), "paystub": None}


@mcp.tool()
async def get_paystub(
    paystub_id: str = Field(description="Paystub ID"),
) -> dict[str, Any]:
    """Get a stored paystub with its payroll run amounts and YTD snapshot."""
    try:
        paystub = sdk_records.get_paystub(paystub_id)
        if paystub is None:
            return {"error": f"Paystub not found: {paystub_id}", "paystub": None}
        run = sdk_records.get_payroll_run(paystub.payroll_run_id)
        return {"paystub": _paystub_summary(paystub, run)}

    except Exception as e:
        logger.error(f"Error getting paystub {paystub_id}: {e}")
        return {"error": str(e), "paystub": None}


@mcp.tool()
async def verify_paystub(
    code: str = Field(description="Verification code printed on the paystub"),
    document_base64: str | None = Field(default=None, description="Optional delivered PDF, base64-encoded"),
) -> dict[str, Any]:
    """Verify a paystub by code. With a document, also checks it matches the issued certified PDF."""
    try:
        document = base64.b64decode(document_base64) if document_base64 else None
        result = sdk_verify_paystub(code, document=document, profile=load_profile())
        if not result.found:
            return {"verified": False, "code": result.code, "paystub": None}

        return {
            "verified": result.hash_matches is not False,
            "code": result.code,
            "employee_name": result.employee.full_name if result.employee else None,
            "paystub": _paystub_summary(result.paystub, result.run),
            "hash_matches": result.hash_matches,
            "certified": result.certified,
        }

    except Exception as e:
        logger.error(f"Error verifying paystub code {code}: {e}")
        return {"error": str(e), "verified": False}


@mcp.tool()
async def resolve_tax_rates(
    jurisdiction: str = Field(description="Jurisdiction code (e.g. 'FL', 'GA')"),
) -> dict[str, Any]:
    """Resolve federal and state withholding rates for a jurisdiction. Unknown codes get the default rates."""
    try:
        rates = TaxPolicy.from_profile(load_profile().tax).resolve(jurisdiction)
        return {"jurisdiction": jurisdiction.strip().upper(), **rates.model_dump()}

    except Exception as e:
        logger.error(f"Error resolving tax rates for {jurisdiction}: {e}")
        return {"error": str(e), "jurisdiction": jurisdiction}


def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
