"""Tests for JSON record storage."""

import json
from datetime import date

import pytest

from nwfpay.sdk import records


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


def run_fields(employee_id, pay_date, gross=100.0):
    return {"employee_id": employee_id, "pay_date": pay_date, "gross_pay": gross, "net_pay": gross}


class TestEmployees:

    def test_save_and_find(self, isolated_data):
        emp = records.save_employee({"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"})
        assert len(emp.id) == 8

        found = records.find_employee_by_id(emp.id)
        assert found == emp
        assert (isolated_data["data_dir"] / "records" / "employees" / f"{emp.id}.json").exists()

    def test_same_email_replaces(self, isolated_data):
        first = records.save_employee({"first_name": "Ada", "email": "ada@example.com", "hourly_rate": 20})
        second = records.save_employee({"first_name": "Ada", "email": "ADA@example.com", "hourly_rate": 30})
        assert first.id == second.id
        assert records.find_employee_by_id(first.id).hourly_rate == 30
        assert len(records.list_employees()) == 1

    def test_missing_employee_returns_none(self, isolated_data):
        assert records.find_employee_by_id("nope") is None

    def test_list_sorted_by_name(self, isolated_data):
        records.save_employee({"first_name": "Zed", "last_name": "Young", "email": "z@example.com"})
        records.save_employee({"first_name": "Amy", "last_name": "Adams", "email": "a@example.com"})
        assert [e.last_name for e in records.list_employees()] == ["Adams", "Young"]


class TestPayrollRuns:

    def test_create_is_readable_immediately(self, isolated_data):
        run = records.create_payroll_run(run_fields("emp1", date(2025, 1, 15)))
        assert run.created_at is not None
        assert records.get_payroll_run(run.id) == run
        assert records.find_payroll_runs_for_employee("emp1") == [run]

    def test_natural_order_and_window(self, isolated_data):
        late = records.create_payroll_run(run_fields("emp1", date(2025, 3, 1)))
        early = records.create_payroll_run(run_fields("emp1", date(2025, 1, 15)))
        same_day = records.create_payroll_run(run_fields("emp1", date(2025, 1, 15)))
        records.create_payroll_run(run_fields("emp2", date(2025, 1, 15)))
        records.create_payroll_run(run_fields("emp1", date(2024, 12, 31)))

        runs = records.find_payroll_runs_for_employee("emp1", date(2025, 1, 1), date(2025, 12, 31))
        assert {r.id for r in runs[:2]} == {early.id, same_day.id}
        assert runs[2].id == late.id
        assert runs == records.find_payroll_runs_for_employee("emp1", date(2025, 1, 1), date(2025, 12, 31))

    def test_invalid_period_rejected(self, isolated_data):
        fields = run_fields("emp1", date(2025, 1, 15))
        fields.update(period_start=date(2025, 1, 20), period_end=date(2025, 1, 10))
        with pytest.raises(ValueError):
            records.create_payroll_run(fields)

    def test_delete_run(self, isolated_data):
        run = records.create_payroll_run(run_fields("emp1", date(2025, 1, 15)))
        assert records.delete_payroll_run(run.id) is True
        assert records.get_payroll_run(run.id) is None
        assert records.delete_payroll_run(run.id) is False


class TestPaystubs:

    def make_stub(self, **kwargs):
        fields = {
            "employee_id": "emp1",
            "payroll_run_id": "run1",
            "pay_date": date(2025, 1, 15),
            "file_name": "nwf_Emp_1_2025-01-15.pdf",
        }
        fields.update(kwargs)
        return records.create_paystub(fields)

    def test_generates_uppercase_code(self, isolated_data):
        stub = self.make_stub()
        assert stub.verification_code
        assert stub.verification_code == stub.verification_code.upper()

    def test_lookup_by_code_is_case_insensitive(self, isolated_data):
        stub = self.make_stub(verification_code="abc123")
        assert stub.verification_code == "ABC123"
        assert records.find_paystub_by_verification_code("  abc123 ").id == stub.id
        assert records.find_paystub_by_verification_code("other") is None
        assert records.find_paystub_by_verification_code("") is None

    def test_attach_artifact(self, isolated_data):
        stub = self.make_stub()
        updated = records.attach_artifact(stub.id, "/tmp/x.pdf", "deadbeef")
        assert updated.artifact_sha256 == "deadbeef"
        assert updated.verification_code == stub.verification_code
        assert records.get_paystub(stub.id).artifact_path == "/tmp/x.pdf"

    def test_attach_artifact_missing_paystub(self, isolated_data):
        with pytest.raises(records.RecordNotFoundError):
            records.attach_artifact("missing", "/tmp/x.pdf", "00")

    def test_delete_paystub(self, isolated_data):
        stub = self.make_stub()
        assert records.delete_paystub(stub.id) is True
        assert records.get_paystub(stub.id) is None
        assert records.find_paystub_by_verification_code(stub.verification_code) is None

    def test_list_filters_by_employee(self, isolated_data):
        self.make_stub()
        self.make_stub(employee_id="emp2")
        assert len(records.list_paystubs()) == 2
        assert [s.employee_id for s in records.list_paystubs("emp2")] == ["emp2"]

    def test_unreadable_record_is_skipped(self, isolated_data):
        self.make_stub()
        bad = records.get_records_dir(records.PAYSTUBS) / "broken.json"
        bad.write_text("{not json")
        assert len(records.list_paystubs()) == 1
