"""Tests for year-to-date aggregation."""

from datetime import date, datetime

import pytest

from nwfpay.sdk.schemas import PayrollRun, YtdTotals
from nwfpay.sdk.ytd import accumulate, year_window


def make_run(run_id, pay_date, gross, employee_id="emp00001", **kwargs):
    fields = {
        "id": run_id,
        "employee_id": employee_id,
        "pay_date": pay_date,
        "gross_pay": gross,
        "federal_income_tax": gross * 0.18,
        "state_income_tax": gross * 0.05,
        "social_security": gross * 0.062,
        "medicare": gross * 0.0145,
    }
    fields["total_taxes"] = sum(fields[k] for k in ("federal_income_tax", "state_income_tax", "social_security", "medicare"))
    fields["net_pay"] = gross - fields["total_taxes"]
    fields.update(kwargs)
    return PayrollRun.model_validate(fields)


def test_year_window():
    assert year_window(date(2025, 3, 14)) == (date(2025, 1, 1), date(2025, 3, 14))


def test_empty_history_is_all_zero():
    ytd = accumulate([], date(2025, 6, 1))
    assert ytd == YtdTotals()
    assert ytd.total_taxes == 0.0


def test_sums_runs_in_window():
    runs = [
        make_run("a", date(2025, 1, 15), 1000),
        make_run("b", date(2025, 1, 31), 500),
    ]
    ytd = accumulate(runs, date(2025, 1, 31))
    assert ytd.gross == pytest.approx(1500)
    assert ytd.federal_income_tax == pytest.approx(270)
    assert ytd.net == pytest.approx(sum(r.net_pay for r in runs))
    assert ytd.total_taxes == pytest.approx(sum(r.total_taxes for r in runs))
    assert ytd.total_taxes == pytest.approx(1500 * 0.3065)


def test_is_additive():
    a = make_run("a", date(2025, 2, 1), 800)
    b = make_run("b", date(2025, 2, 15), 650)

    first = accumulate([a], date(2025, 2, 1))
    second = accumulate([a, b], date(2025, 2, 15))

    for field in YtdTotals.model_fields:
        assert getattr(second, field) == pytest.approx(getattr(first, field) + getattr(accumulate([b], date(2025, 2, 15)), field))
    assert second.gross == pytest.approx(first.gross + b.gross_pay)
    assert second.net == pytest.approx(first.net + b.net_pay)


def test_excludes_prior_year_and_future_runs():
    runs = [
        make_run("old", date(2024, 12, 31), 999),
        make_run("now", date(2025, 1, 1), 100),
        make_run("later", date(2025, 3, 1), 777),
    ]
    ytd = accumulate(runs, date(2025, 2, 1))
    assert ytd.gross == pytest.approx(100)


def test_as_of_date_is_inclusive():
    ytd = accumulate([make_run("a", date(2025, 5, 9), 250)], date(2025, 5, 9))
    assert ytd.gross == pytest.approx(250)


def test_filters_by_employee():
    runs = [
        make_run("a", date(2025, 1, 10), 100, employee_id="emp00001"),
        make_run("b", date(2025, 1, 10), 900, employee_id="emp00002"),
    ]
    assert accumulate(runs, date(2025, 1, 31), employee_id="emp00002").gross == pytest.approx(900)


def test_partial_history_dicts_count_missing_fields_as_zero():
    runs = [
        {"id": "a", "pay_date": "2025-01-15", "gross_pay": 1000},
        {"id": "b", "pay_date": "2025-01-20", "gross_pay": "oops", "net_pay": 50},
        {"id": "c", "gross_pay": 5000},  # no pay date: skipped
    ]
    ytd = accumulate(runs, date(2025, 1, 31))
    assert ytd.gross == pytest.approx(1000)
    assert ytd.net == pytest.approx(50)
    assert ytd.medicare == 0.0


def test_datetime_as_of_date_is_reduced_to_its_date():
    assert year_window(datetime(2025, 1, 31, 12, 30)) == (date(2025, 1, 1), date(2025, 1, 31))

    runs = [make_run("a", date(2025, 1, 31), 400), make_run("b", date(2025, 2, 1), 100)]
    ytd = accumulate(runs, datetime(2025, 1, 31, 12))
    assert ytd.gross == pytest.approx(400)
