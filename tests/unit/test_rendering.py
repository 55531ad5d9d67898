"""Tests for paystub layouts (vector PDF and HTML)."""

import asyncio
import io
from datetime import date, datetime, timezone

import pytest
from PyPDF2 import PdfReader

from nwfpay.sdk.rendering import (
    PLACEHOLDER,
    HtmlPaystubRenderer,
    ReportLabPaystubRenderer,
    build_stub_view,
    display_employee_id,
    get_renderer,
    mask_employee_id,
    money,
    verification_tag,
)
from nwfpay.sdk.schemas import (
    DocumentsProfile,
    Employee,
    PayrollRun,
    Paystub,
    ProfileModel,
    YtdTotals,
)


@pytest.fixture
def stub_inputs():
    employee = Employee.model_validate({
        "id": "a1b2c3d4e5f6",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "address": {"line1": "12 Engine Way", "city": "Tampa", "state": "FL", "zip": "33601"},
        "direct_deposit": {"bank_name": "First Bank", "account_number_last4": "6789"},
        "hourly_rate": 25,
    })
    run = PayrollRun.model_validate({
        "id": "run0001",
        "employee_id": employee.id,
        "period_start": date(2025, 1, 1),
        "period_end": date(2025, 1, 14),
        "pay_date": date(2025, 1, 14),
        "hours_worked": 80,
        "hourly_rate": 25,
        "gross_pay": 2000,
        "federal_income_tax": 360,
        "state_income_tax": 0,
        "social_security": 124,
        "medicare": 29,
        "total_taxes": 513,
        "net_pay": 1487,
    })
    ytd = YtdTotals(gross=4000, net=2974, federal_income_tax=720, social_security=248, medicare=58)
    paystub = Paystub(
        id="stub0001",
        employee_id=employee.id,
        payroll_run_id=run.id,
        pay_date=run.pay_date,
        file_name="nwf_Emp_c3d4e5f6_2025-01-14.pdf",
        verification_code="ABCDEF1234",
        ytd=ytd,
        created_at=datetime(2025, 1, 14, tzinfo=timezone.utc),
    )
    return employee, run, paystub, ytd


def pdf_text(raw: bytes) -> str:
    reader = PdfReader(io.BytesIO(raw))
    return "\n".join(page.extract_text() for page in reader.pages)


class TestFormatting:

    def test_money(self):
        assert money(1234.5) == "1,234.50"
        assert money(0) == "0.00"
        assert money("junk") == "0.00"

    def test_display_and_mask_employee_id(self, stub_inputs):
        employee = stub_inputs[0]
        assert display_employee_id(employee) == "Emp_c3d4e5f6"
        assert mask_employee_id("Emp_c3d4e5f6") == "XXXXXXd4e5f6"
        assert mask_employee_id("12345") == "12345"

    def test_external_id_wins(self, stub_inputs):
        employee = stub_inputs[0].model_copy(update={"external_employee_id": "E-42"})
        assert display_employee_id(employee) == "E-42"

    def test_verification_tag_is_deterministic(self):
        assert verification_tag("stub0001") == "NWF_PAYSTUB_stub0001"

    def test_view_has_five_deduction_lines(self, stub_inputs):
        view = build_stub_view(*stub_inputs)
        assert [d[0] for d in view.deductions] == [
            "Federal Income Tax", "State Income Tax", "Social Security", "Medicare", "Total Taxes",
        ]
        assert view.deductions[-1] == ("Total Taxes", "513.00", "1,026.00")
        assert view.verification_url.endswith("/ABCDEF1234")
        assert view.bank_line == "First Bank Checking ****6789"

    def test_missing_optional_fields(self, stub_inputs):
        _, run, paystub, ytd = stub_inputs
        bare = Employee(id="x")
        run = run.model_copy(update={"period_start": None, "period_end": None})
        view = build_stub_view(bare, run, paystub, ytd)
        assert view.period_start == PLACEHOLDER
        assert view.period_end == PLACEHOLDER
        assert view.address_lines == []
        assert view.bank_line == ""
        assert view.email == ""


class TestPdfRenderer:

    def test_renders_two_stubs(self, stub_inputs):
        raw = asyncio.run(ReportLabPaystubRenderer().render(*stub_inputs))
        assert raw.startswith(b"%PDF")

        text = pdf_text(raw)
        assert text.count("Net Pay This Period") == 2
        assert "2,000.00" in text
        assert "4,000.00" in text
        assert "(513.00)" in text
        assert "1,487.00" in text
        assert "01/14/2025" in text
        assert "NWF_PAYSTUB_stub0001" in text
        assert "ABCDEF1234" in text

    def test_single_copy(self, stub_inputs):
        profile = ProfileModel(documents=DocumentsProfile(copies=1))
        raw = asyncio.run(ReportLabPaystubRenderer(profile).render(*stub_inputs))
        assert pdf_text(raw).count("Net Pay This Period") == 1

    def test_missing_optional_fields_do_not_fail(self, stub_inputs):
        _, run, paystub, ytd = stub_inputs
        run = run.model_copy(update={"period_start": None, "period_end": None})
        raw = asyncio.run(ReportLabPaystubRenderer().render(Employee(id="x"), run, paystub, ytd))
        assert len(PdfReader(io.BytesIO(raw)).pages) == 1


class TestHtmlRenderer:

    def test_markup_contents(self, stub_inputs):
        markup = asyncio.run(HtmlPaystubRenderer().render(*stub_inputs)).decode("utf-8")

        assert "@page { size: Letter; margin: 5mm; }" in markup
        assert markup.count('class="stub"') == 2
        assert "XXXXXXd4e5f6" in markup
        assert "$2,000.00" in markup
        assert "($513.00)" in markup
        assert "NWF_PAYSTUB_stub0001" in markup
        assert "opacity: 0.05" in markup

    def test_placeholder_for_missing_period(self, stub_inputs):
        employee, run, paystub, ytd = stub_inputs
        run = run.model_copy(update={"period_start": None})
        markup = asyncio.run(HtmlPaystubRenderer().render(employee, run, paystub, ytd)).decode("utf-8")
        assert PLACEHOLDER in markup

    def test_values_are_escaped(self, stub_inputs):
        employee, run, paystub, ytd = stub_inputs
        employee = employee.model_copy(update={"first_name": "<script>"})
        markup = asyncio.run(HtmlPaystubRenderer().render(employee, run, paystub, ytd)).decode("utf-8")
        assert "<script>" not in markup
        assert "&lt;script&gt;" in markup


class TestRegistry:

    def test_get_renderer_by_format(self):
        assert isinstance(get_renderer("pdf"), ReportLabPaystubRenderer)
        assert isinstance(get_renderer("HTML"), HtmlPaystubRenderer)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown paystub format"):
            get_renderer("docx")
