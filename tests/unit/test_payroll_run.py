"""End-to-end tests for the payroll pipeline.

run -> store -> YTD -> paystub -> render -> certify -> store artifact,
against isolated data directories. The browser backend is replaced with
a fake that prints a small ReportLab PDF.
"""

import asyncio
import hashlib
import io
import json
from datetime import date

import pytest
from reportlab.pdfgen import canvas

from nwfpay.sdk import (
    BackendError,
    CertificationError,
    EmployeeNotFoundError,
    PayrollInputError,
    ProfileModel,
    process_payroll,
    produce_document,
    read_metadata,
    records,
    run_payroll,
    verify_paystub,
)
from nwfpay.sdk.payroll import build_file_name


class FakeBackend:
    """Records the markup it receives and returns a one-page PDF."""

    def __init__(self, output=None):
        self.calls = []
        self.output = output

    async def html_to_pdf(self, markup, options):
        self.calls.append((markup, options))
        if self.output is not None:
            return self.output
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer)
        c.drawString(72, 720, "printed from markup")
        c.showPage()
        c.save()
        return buffer.getvalue()


class FailingBackend:
    """A browser backend that cannot print."""

    async def html_to_pdf(self, markup, options):
        raise BackendError("browser exited with status 1")


@pytest.fixture
def isolated_data(tmp_path, monkeypatch):
    """Set up isolated config and data directories."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    config_dir.mkdir()
    data_dir.mkdir()

    monkeypatch.setenv("NWF_PAY_CONFIG_PATH", str(config_dir))
    (config_dir / "settings.json").write_text(json.dumps({"data_dir": str(data_dir)}))

    return {"config_dir": config_dir, "data_dir": data_dir}


@pytest.fixture
def employee(isolated_data):
    return records.save_employee({
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
        "hourly_rate": 25,
        "state_code": "TX",
    })


class TestRunPayroll:

    def test_first_run_ytd_equals_current(self, employee):
        result = run_payroll(employee.id, date(2025, 1, 15), 40)

        assert result.run.gross_pay == pytest.approx(1000)
        assert result.run.state_income_tax == 0.0
        assert result.run.federal_income_tax == pytest.approx(180)
        assert result.run.net_pay == pytest.approx(1000 - 180 - 62 - 14.5)

        assert result.ytd.gross == pytest.approx(result.run.gross_pay)
        assert result.ytd.net == pytest.approx(result.run.net_pay)
        assert result.paystub.payroll_run_id == result.run.id
        assert result.paystub.verification_code

    def test_ytd_accumulates_across_runs(self, employee):
        first = run_payroll(employee.id, date(2025, 1, 15), 40)
        second = run_payroll(employee.id, date(2025, 1, 31), 20, rate=30)

        assert second.run.hourly_rate == 30
        assert second.run.gross_pay == pytest.approx(600)
        assert second.ytd.gross == pytest.approx(1600)
        assert second.ytd.net == pytest.approx(first.run.net_pay + second.run.net_pay)
        # Earlier snapshot is frozen
        assert records.get_paystub(first.paystub.id).ytd.gross == pytest.approx(1000)

    def test_ytd_resets_each_year(self, employee):
        run_payroll(employee.id, date(2024, 12, 31), 40)
        result = run_payroll(employee.id, date(2025, 1, 3), 10)
        assert result.ytd.gross == pytest.approx(250)

    def test_unknown_employee(self, isolated_data):
        with pytest.raises(EmployeeNotFoundError):
            run_payroll("missing", date(2025, 1, 15), 40)
        assert records.find_payroll_runs_for_employee("missing") == []

    def test_non_numeric_hours_count_as_zero(self, employee):
        result = run_payroll(employee.id, date(2025, 1, 15), "forty")
        assert result.run.gross_pay == 0.0
        assert result.run.net_pay == 0.0

    def test_negative_hours_rejected(self, employee):
        with pytest.raises(PayrollInputError):
            run_payroll(employee.id, date(2025, 1, 15), -5)

    @pytest.mark.parametrize("start,end,pay_date", [
        (date(2025, 1, 20), date(2025, 1, 10), date(2025, 1, 15)),
        (date(2025, 1, 1), date(2025, 1, 14), date(2025, 1, 20)),
        (date(2025, 1, 10), None, date(2025, 1, 5)),
    ])
    def test_inconsistent_period_rejected(self, employee, start, end, pay_date):
        with pytest.raises(PayrollInputError):
            run_payroll(employee.id, pay_date, 40, period_start=start, period_end=end)

    def test_pay_date_at_period_end(self, employee):
        result = run_payroll(
            employee.id, date(2025, 1, 14), 80,
            period_start=date(2025, 1, 1), period_end=date(2025, 1, 14),
        )
        assert result.run.period_end == date(2025, 1, 14)

    def test_file_name(self, employee):
        result = run_payroll(employee.id, date(2025, 1, 15), 40)
        assert result.paystub.file_name == f"nwf_Emp_{employee.id[-8:]}_2025-01-15.pdf"
        assert build_file_name(employee, date(2025, 1, 15), prefix="acme") == f"acme_Emp_{employee.id[-8:]}_2025-01-15.pdf"

    def test_profile_tax_override(self, employee):
        profile = ProfileModel.model_validate({"tax": {"jurisdictions": {"TX": {"state_rate": 0.01}}}})
        result = run_payroll(employee.id, date(2025, 1, 15), 40, profile=profile)
        assert result.run.state_income_tax == pytest.approx(10)


class TestProcessPayroll:

    def test_pdf_document_is_certified_and_stored(self, employee):
        result = asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40))

        document = result.document
        assert document.certified
        assert document.content_type == "application/pdf"
        assert document.file_name.endswith("_2025-01-15.pdf")
        assert read_metadata(document.content)["creator"] == "NWF Payroll Certified Document System v2025"

        stored = records.get_paystub(result.paystub.id)
        assert stored.artifact_sha256 == hashlib.sha256(document.content).hexdigest()
        with open(stored.artifact_path, "rb") as f:
            assert f.read() == document.content

    def test_html_pdf_uses_backend(self, employee):
        backend = FakeBackend()
        result = asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40, fmt="html-pdf", backend=backend))

        assert len(backend.calls) == 1
        markup, options = backend.calls[0]
        assert "NWF_PAYSTUB_" + result.paystub.id in markup
        assert (options.format, options.margin) == ("Letter", "5mm")
        assert read_metadata(result.document.content)["title"] == "Official Paystub Verification Document"

    def test_bad_backend_output_fails_certification(self, employee):
        with pytest.raises(CertificationError):
            asyncio.run(process_payroll(
                employee.id, date(2025, 1, 15), 40,
                fmt="html-pdf", backend=FakeBackend(output=b"not a pdf"),
            ))

    def test_failed_document_discards_run_and_paystub(self, employee):
        with pytest.raises(BackendError):
            asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40, fmt="html-pdf", backend=FailingBackend()))

        assert records.find_payroll_runs_for_employee(employee.id) == []
        assert records.list_paystubs(employee.id) == []

    def test_retry_after_failure_counts_pay_once(self, employee):
        with pytest.raises(CertificationError):
            asyncio.run(process_payroll(
                employee.id, date(2025, 1, 15), 40,
                fmt="html-pdf", backend=FakeBackend(output=b"not a pdf"),
            ))

        result = asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40, fmt="pdf"))
        assert result.ytd.gross == pytest.approx(1000)
        assert len(records.find_payroll_runs_for_employee(employee.id)) == 1
        assert [s.id for s in records.list_paystubs(employee.id)] == [result.paystub.id]

    def test_html_format_not_allowed_for_issue(self, employee):
        with pytest.raises(ValueError):
            asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40, fmt="html"))

    def test_html_preview_is_not_certified(self, employee):
        result = run_payroll(employee.id, date(2025, 1, 15), 40)
        document = asyncio.run(produce_document(result.employee, result.run, result.paystub, fmt="html"))
        assert not document.certified
        assert document.file_name.endswith(".html")
        assert b"Total Taxes" in document.content

    def test_unknown_format(self, employee):
        result = run_payroll(employee.id, date(2025, 1, 15), 40)
        with pytest.raises(ValueError):
            asyncio.run(produce_document(result.employee, result.run, result.paystub, fmt="docx"))


class TestVerifyPaystub:

    def test_verify_by_code_and_document(self, employee):
        result = asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40))
        code = result.paystub.verification_code

        check = verify_paystub(f"  {code.lower()} ")
        assert check.found
        assert check.paystub.id == result.paystub.id
        assert check.employee.id == employee.id
        assert check.hash_matches is None

        check = verify_paystub(code, document=result.document.content)
        assert check.hash_matches is True
        assert check.certified is True

    def test_tampered_document_does_not_match(self, employee):
        result = asyncio.run(process_payroll(employee.id, date(2025, 1, 15), 40))
        tampered = result.document.content + b"\n% edited"
        check = verify_paystub(result.paystub.verification_code, document=tampered)
        assert check.hash_matches is False

    def test_unknown_code(self, isolated_data):
        check = verify_paystub("NOPE")
        assert not check.found
        assert check.code == "NOPE"
