"""
Record storage for employees, payroll runs and paystubs.

This module is the storage collaborator: it persists records as JSON files
and hands back frozen schema objects. It performs no payroll logic. CLI and
MCP tools should call the payroll module, which calls these functions.

Layout (under the data directory):

    records/employees/<id>.json
    records/payroll_runs/<id>.json
    records/paystubs/<id>.json
    paystubs/<year>/<file_name>        rendered, certified documents

Read-after-write:
    create_* functions write the file before returning, so a history
    query issued afterwards always sees the record just created. YTD
    aggregation relies on this.

Ordering:
    find_payroll_runs_for_employee() returns runs ascending by pay_date,
    then creation time. This is the "natural iteration order" that YTD
    summation follows, so repeated aggregation is numerically identical.
"""

import hashlib
import json
import logging
import os
import secrets
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import get_data_path
from .schemas import Employee, PayrollRun, Paystub

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


EMPLOYEES = "employees"
PAYROLL_RUNS = "payroll_runs"
PAYSTUBS = "paystubs"


class RecordNotFoundError(Exception):
    """Raised when a referenced record does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class EmployeeNotFoundError(RecordNotFoundError):
    """Raised when payroll is requested for an unknown employee."""

    def __init__(self, employee_id: str):
        super().__init__("Employee", employee_id)


# =============================================================================
# Paths and low-level I/O
# =============================================================================


def get_records_dir(kind: Optional[str] = None) -> Path:
    """Get the records directory (or one record kind's subdirectory)."""
    path = get_data_path() / "records"
    if kind:
        path = path / kind
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_artifacts_dir(year: Union[int, str]) -> Path:
    """Directory holding rendered paystub documents for a year."""
    path = get_data_path() / "paystubs" / str(year)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _write(kind: str, record_id: str, payload: Dict[str, Any]) -> Path:
    path = get_records_dir(kind) / f"{record_id}.json"
    tmp_path = path.with_suffix(".json.tmp")
    with open(tmp_path, "w") as f:
        json.dump(payload, f, indent=2)
    os.replace(tmp_path, path)
    return path


def _read(kind: str, record_id: str) -> Optional[Dict[str, Any]]:
    path = get_records_dir(kind) / f"{record_id}.json"
    if not path.exists():
        return None
    with open(path) as f:
        return json.load(f)


def _delete(kind: str, record_id: str) -> bool:
    path = get_records_dir(kind) / f"{record_id}.json"
    if not path.exists():
        return False
    path.unlink()
    logger.warning(f"Deleted {kind} record {record_id}")
    return True


def _scan(kind: str) -> List[Dict[str, Any]]:
    """Load every record of a kind. Unreadable files are logged and skipped."""
    results = []
    for json_file in sorted(get_records_dir(kind).glob("*.json")):
        try:
            with open(json_file) as f:
                results.append(json.load(f))
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Skipping unreadable record {json_file.name}: {e}")
    return results


# =============================================================================
# Employees
# =============================================================================


def _generate_employee_id(data: Dict[str, Any]) -> str:
    """Employee IDs are derived from email so re-adding updates in place."""
    email = (data.get("email") or "").strip().lower()
    if not email:
        return _new_id()
    return hashlib.sha256(f"employee|{email}".encode()).hexdigest()[:8]


def save_employee(data: Union[Employee, Dict[str, Any]]) -> Employee:
    """Create or replace an employee record.

    This is the explicit policy-update path: the whole record is
    re-validated and written, never patched in place.
    """
    if isinstance(data, Employee):
        payload = data.model_dump(mode="json")
    else:
        payload = dict(data)
        payload.setdefault("id", _generate_employee_id(payload))

    employee = Employee.model_validate(payload)
    _write(EMPLOYEES, employee.id, employee.model_dump(mode="json"))
    logger.info(f"Saved employee {employee.id} ({employee.full_name})")
    return employee


def find_employee_by_id(employee_id: str) -> Optional[Employee]:
    """Look up an employee. Returns None when not found."""
    data = _read(EMPLOYEES, employee_id)
    if data is None:
        logger.debug(f"employee lookup miss: {employee_id}")
        return None
    return Employee.model_validate(data)


def list_employees() -> List[Employee]:
    """All employees, sorted by last then first name."""
    employees = [Employee.model_validate(d) for d in _scan(EMPLOYEES)]
    return sorted(employees, key=lambda e: (e.last_name.lower(), e.first_name.lower(), e.id))


# =============================================================================
# Payroll runs
# =============================================================================


def _run_sort_key(run: PayrollRun):
    created = run.created_at or datetime.min.replace(tzinfo=timezone.utc)
    return (run.pay_date, created, run.id)


def create_payroll_run(fields: Dict[str, Any]) -> PayrollRun:
    """Persist a new payroll run and return it.

    Runs are immutable: there is no update function. A correction is a
    new run.
    """
    payload = dict(fields)
    payload["id"] = _new_id()
    payload["created_at"] = _now()

    run = PayrollRun.model_validate(payload)
    _write(PAYROLL_RUNS, run.id, run.model_dump(mode="json"))
    logger.info(
        f"Created payroll run {run.id} for employee {run.employee_id} "
        f"(pay date {run.pay_date}, gross {run.gross_pay:.2f})"
    )
    return run


def get_payroll_run(run_id: str) -> Optional[PayrollRun]:
    data = _read(PAYROLL_RUNS, run_id)
    return PayrollRun.model_validate(data) if data is not None else None


def delete_payroll_run(run_id: str) -> bool:
    """Remove a payroll run. Only used to discard a run whose paystub
    document could not be produced; issued runs are never deleted.

    Returns:
        True if a record was removed
    """
    return _delete(PAYROLL_RUNS, run_id)


def find_payroll_runs_for_employee(
    employee_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PayrollRun]:
    """Payroll runs for one employee with pay_date in [start, end].

    Either bound may be None (open). Results are in natural order:
    ascending pay_date, then creation time.
    """
    runs = []
    for data in _scan(PAYROLL_RUNS):
        if data.get("employee_id") != employee_id:
            continue
        run = PayrollRun.model_validate(data)
        if start is not None and run.pay_date < start:
            continue
        if end is not None and run.pay_date > end:
            continue
        runs.append(run)

    runs.sort(key=_run_sort_key)
    logger.debug(f"found {len(runs)} run(s) for {employee_id} in {start}..{end}")
    return runs


# =============================================================================
# Paystubs
# =============================================================================


def generate_verification_code() -> str:
    """Random, upper-case code printed on the stub and used for lookup."""
    return secrets.token_hex(5).upper()


def normalize_verification_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def create_paystub(fields: Dict[str, Any]) -> Paystub:
    """Persist a new paystub and return it.

    A verification code is generated unless one is supplied.
    """
    payload = dict(fields)
    payload["id"] = _new_id()
    payload["created_at"] = _now()
    if not payload.get("verification_code"):
        payload["verification_code"] = generate_verification_code()
    else:
        payload["verification_code"] = normalize_verification_code(payload["verification_code"])

    stub = Paystub.model_validate(payload)
    _write(PAYSTUBS, stub.id, stub.model_dump(mode="json"))
    logger.info(f"Created paystub {stub.id} for run {stub.payroll_run_id} ({stub.file_name})")
    return stub


def get_paystub(paystub_id: str) -> Optional[Paystub]:
    data = _read(PAYSTUBS, paystub_id)
    return Paystub.model_validate(data) if data is not None else None


def delete_paystub(paystub_id: str) -> bool:
    """Remove a paystub record. Paired with delete_payroll_run() on a failed issue."""
    return _delete(PAYSTUBS, paystub_id)


def list_paystubs(employee_id: Optional[str] = None) -> List[Paystub]:
    """Paystubs ascending by pay date, optionally for one employee."""
    stubs = [
        Paystub.model_validate(d)
        for d in _scan(PAYSTUBS)
        if employee_id is None or d.get("employee_id") == employee_id
    ]
    return sorted(stubs, key=lambda s: (s.pay_date, s.created_at or _now(), s.id))


def find_paystub_by_verification_code(code: str) -> Optional[Paystub]:
    """Resolve a verification code (case-insensitive) to its paystub."""
    wanted = normalize_verification_code(code)
    if not wanted:
        return None
    for data in _scan(PAYSTUBS):
        if normalize_verification_code(data.get("verification_code")) == wanted:
            return Paystub.model_validate(data)
    return None


def attach_artifact(paystub_id: str, artifact_path: Union[str, Path], sha256: str) -> Paystub:
    """Attach the rendered document pointer and its hash to a paystub.

    This is the only change a paystub accepts after creation.

    Raises:
        RecordNotFoundError: If the paystub does not exist
    """
    stub = get_paystub(paystub_id)
    if stub is None:
        raise RecordNotFoundError("Paystub", paystub_id)

    updated = stub.model_copy(update={
        "artifact_path": str(artifact_path),
        "artifact_sha256": sha256,
    })
    _write(PAYSTUBS, updated.id, updated.model_dump(mode="json"))
    logger.debug(f"attached artifact to paystub {paystub_id}: {artifact_path}")
    return updated
