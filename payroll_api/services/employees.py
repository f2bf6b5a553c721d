# payroll_api/services/employees.py
"""
Employee master data. Employees are never hard-deleted: "delete" means status -> Terminated.
"""
import csv
import io
import logging
import re
from datetime import date, datetime

import openpyxl

from payroll_api.common.dates import iso
from payroll_api.common.errors import NotFoundError, PersistenceError, ValidationError
from payroll_api.common.listing import apply_q_search
from payroll_api.common.tx import commit, flush
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity

log = logging.getLogger(__name__)

SLUG = "employees"
ALLOWED_EXTS = (".csv", ".xlsx")


def row(e: Employee):
    return {
        "id": e.id,
        "employee_code": e.employee_code,
        "first_name": e.first_name,
        "last_name": e.last_name,
        "full_name": e.full_name,
        "id_number": e.id_number,
        "company": e.company,
        "department": e.department,
        "position": e.position,
        "status": e.status,
        "email": e.email,
        "phone": e.phone,
        "address": e.address,
        "date_joined": iso(e.date_joined),
        "base_salary": float(e.base_salary) if e.base_salary is not None else None,
        "tax_number": e.tax_number,
        "bank_name": e.bank_name,
        "bank_account": e.bank_account,
        "bank_branch": e.bank_branch,
        "vip_code": e.vip_code,
        "vip_code_requested": bool(e.vip_code_requested),
        "vip_code_request_date": iso(e.vip_code_request_date),
        "vip_code_status": e.vip_code_status,
        "created_at": iso(e.created_at),
        "updated_at": iso(e.updated_at),
    }


def _load(employee_id) -> Employee:
    e = db.session.get(Employee, employee_id)
    if e is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return e


def _by_code(code):
    return Employee.query.filter(Employee.employee_code == code).first()


def list_employees(filters=None):
    f = filters or {}
    q = Employee.query
    if f.get("company"):
        q = q.filter(Employee.company == f["company"])
    if f.get("department"):
        q = q.filter(Employee.department == f["department"])
    if f.get("status"):
        q = q.filter(Employee.status == f["status"])
    q = apply_q_search(q, Employee.first_name, Employee.last_name,
                       Employee.employee_code, Employee.id_number, q=f.get("q", ""))
    q = q.order_by(Employee.last_name.asc(), Employee.first_name.asc(), Employee.id.asc())
    return [row(e) for e in q.all()]


def get_employee(employee_id):
    return row(_load(employee_id))


def create_employee(data, user_id):
    res = validate_record(SLUG, data)
    if not res.ok:
        raise ValidationError(res.errors)
    if _by_code(res.value["employee_code"]):
        raise PersistenceError(f"Employee code {res.value['employee_code']} already exists")
    e = Employee(**res.value)
    db.session.add(e)
    log_activity(user_id, "Create Employee", f"Created employee {e.full_name} ({e.employee_code})")
    commit("employee")
    return row(e)


def _apply_update(e: Employee, value):
    if "employee_code" in value and value["employee_code"] != e.employee_code:
        if _by_code(value["employee_code"]):
            raise PersistenceError(f"Employee code {value['employee_code']} already exists")
    changed = [k for k, v in value.items() if getattr(e, k) != v]
    for k in changed:
        setattr(e, k, value[k])
    return changed


def update_employee(employee_id, data, user_id):
    e = _load(employee_id)
    res = validate_record(SLUG, data, partial=True)
    if not res.ok:
        raise ValidationError(res.errors)
    changed = _apply_update(e, res.value)
    if changed:
        log_activity(user_id, "Update Employee",
                     f"Updated employee {e.full_name} ({', '.join(sorted(changed))})")
        commit("employee")
    return row(e)


def terminate_employee(employee_id, user_id):
    e = _load(employee_id)
    if e.status != "Terminated":
        e.status = "Terminated"
        log_activity(user_id, "Terminate Employee", f"Terminated employee {e.full_name} ({e.employee_code})")
        commit("employee")
    return row(e)


# ---------- VIP payroll code ----------

def request_vip_code(employee_id, user_id):
    """Flag the employee for a code on the VIP payroll system. Asking twice is a no-op."""
    e = _load(employee_id)
    if e.vip_code_status == "Issued":
        raise PersistenceError(f"{e.full_name} already has VIP code {e.vip_code}")
    if e.vip_code_status != "Requested":
        e.vip_code_requested = True
        e.vip_code_request_date = datetime.utcnow()
        e.vip_code_status = "Requested"
        log_activity(user_id, "Request VIP Code", f"Requested VIP code for {e.full_name} ({e.employee_code})")
        commit("employee")
    return row(e)


def set_vip_code(employee_id, data, user_id):
    """Record the outcome of a request: Issued needs the code, Rejected clears it."""
    e = _load(employee_id)
    res = validate_record("vip-codes", data)
    if not res.ok:
        raise ValidationError(res.errors)
    status, code = res.value["vip_code_status"], res.value.get("vip_code")
    if status == "Issued" and not code:
        raise ValidationError.single("vip_code", "vip_code is required when the status is Issued")
    if status == "Issued":
        e.vip_code = code
    elif status in ("Not Requested", "Rejected"):
        e.vip_code = None
    if status == "Not Requested":
        e.vip_code_requested = False
        e.vip_code_request_date = None
    e.vip_code_status = status
    log_activity(user_id, "Update VIP Code", f"VIP code for {e.full_name} is now {status}")
    commit("employee")
    return row(e)


# ---------- bulk import ----------

def _norm_key(k) -> str:
    k = re.sub(r"[\s\-]+", "_", str(k or "").strip())
    k = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", k)
    return k.lower()


def normalize_row(raw: dict) -> dict:
    out = {}
    for k, v in raw.items():
        if isinstance(v, str):
            v = v.strip()
        out[_norm_key(k)] = v
    return out


def _cell(v):
    # spreadsheet cells arrive typed; the schema wants text for codes and ISO dates
    if v is None:
        return ""
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def rows_from_csv(text: str) -> list:
    return [normalize_row(r) for r in csv.DictReader(io.StringIO(text))]


def read_rows(file_storage) -> list:
    """CSV or XLSX upload -> list of dicts keyed by snake_case header."""
    name = (file_storage.filename or "").lower()
    ext = name[name.rfind("."):] if "." in name else ""
    if ext not in ALLOWED_EXTS:
        raise ValidationError.single("file", "Upload a .csv or .xlsx file")

    data = file_storage.read()
    if ext == ".csv":
        if isinstance(data, bytes):
            try:
                text = data.decode("utf-8-sig")
            except UnicodeDecodeError:
                text = data.decode("latin-1")
        else:
            text = str(data)
        return rows_from_csv(text)

    wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True, read_only=True)
    ws = wb.active
    rows, headers = [], []
    for i, values in enumerate(ws.iter_rows(values_only=True)):
        if i == 0:
            headers = [_norm_key(h) if h is not None else f"col{j + 1}" for j, h in enumerate(values)]
            continue
        if all(v is None for v in values):
            continue
        rows.append(normalize_row({
            headers[j] if j < len(headers) else f"col{j + 1}": _cell(v)
            for j, v in enumerate(values)
        }))
    wb.close()
    return rows


def import_employees(rows, user_id):
    """
    Create-or-update by employee_code. Bad rows are reported, good rows are saved.
    Row numbers are 1-based data rows (header excluded).
    """
    created = updated = 0
    errors = []
    for idx, raw in enumerate(rows or [], start=1):
        if not isinstance(raw, dict):
            errors.append({"row": idx, "errors": [{"field": "__all__", "message": "Expected an object"}]})
            continue
        # blank cells leave existing values alone
        raw = {k: v for k, v in normalize_row(raw).items() if v not in ("", None)}
        code = str(raw.get("employee_code") or "").strip()
        existing = _by_code(code) if code else None

        res = validate_record(SLUG, raw, partial=existing is not None)
        if not res.ok:
            errors.append({"row": idx, "employee_code": code or None, "errors": res.errors})
            continue

        if existing:
            if _apply_update(existing, res.value):
                updated += 1
        else:
            db.session.add(Employee(**res.value))
            flush("employee import")
            created += 1

    log_activity(user_id, "Import Employees",
                 f"Imported employees: {created} created, {updated} updated, {len(errors)} rejected")
    commit("employee import")
    log.info("employee import created=%s updated=%s rejected=%s", created, updated, len(errors))
    return {"created": created, "updated": updated, "rejected": len(errors), "errors": errors}
