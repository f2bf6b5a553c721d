# payroll_api/services/payroll_records.py
"""
Create/update/delete/list for every PayrollRecord kind.

All kinds share the payroll_records table; the kind (see schemas.payroll_records.KINDS)
decides which record_type values a call may touch and which rules apply to the input.
Callers pass the acting user id; nothing here authenticates.
"""
import logging
from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy.orm import contains_eager

from payroll_api.common.dates import day_count, iso
from payroll_api.common.errors import NotFoundError, PersistenceError, ValidationError
from payroll_api.common.tx import commit
from payroll_api.extensions import db
from payroll_api.models.employee import COMPANIES, Employee
from payroll_api.models.payroll_record import ArchivedPayrollRecord, PayrollRecord
from payroll_api.schemas import get_kind, validate_record
from payroll_api.schemas.payroll_records import DEFAULT_OVERTIME_RATE
from payroll_api.services.activity import log_activity

log = logging.getLogger(__name__)


# ---------- helpers ----------

def _num(v):
    return float(v) if v is not None else None


def _supplied(data, name):
    head, *rest = name.split("_")
    camel = head + "".join(p.title() for p in rest)
    for key in (name, camel):
        v = data.get(key)
        if v is not None and not (isinstance(v, str) and not v.strip()):
            return True
    return False


def _validated(slug, data, partial=False):
    res = validate_record(slug, data, partial=partial)
    if not res.ok:
        raise ValidationError(res.errors)
    return res.value


def require_employee(employee_id) -> Employee:
    emp = db.session.get(Employee, employee_id)
    if emp is None:
        raise PersistenceError(
            f"Employee {employee_id} does not exist",
            payload={"employee_id": employee_id},
        )
    return emp


def _differs(current, new):
    if isinstance(current, Decimal) or isinstance(new, Decimal):
        if current is None or new is None:
            return current is not new
        return Decimal(str(current)) != Decimal(str(new))
    return current != new


def row(r: PayrollRecord):
    emp = r.employee
    return {
        "id": r.id,
        "employee_id": r.employee_id,
        "employee_name": emp.full_name if emp else None,
        "employee_code": emp.employee_code if emp else None,
        "company": emp.company if emp else None,
        "record_type": r.record_type,
        "date": iso(r.date),
        "amount": _num(r.amount),
        "hours": _num(r.hours),
        "rate": _num(r.rate),
        "start_date": iso(r.start_date),
        "end_date": iso(r.end_date),
        "total_days": _num(r.total_days),
        "status": r.status,
        "approved": bool(r.approved),
        "recurring": bool(r.recurring),
        "details": r.details,
        "description": r.description,
        "notes": r.notes,
        "document_image": r.document_image,
        "created_by": r.created_by,
        "created_at": iso(r.created_at),
        "updated_at": iso(r.updated_at),
    }


def _load(kind, record_id) -> PayrollRecord:
    rec = db.session.get(PayrollRecord, record_id)
    if rec is None or rec.record_type not in kind.record_types:
        raise NotFoundError(f"{kind.label} record {record_id} not found")
    return rec


# ---------- lifecycle ----------

def create_record(slug, data, user_id):
    """
    1) validate the whole input (defaults applied)
    2) the employee must exist
    3) derive total_days for span kinds unless the caller typed one in
    4) insert + activity entry, one commit
    """
    kind = get_kind(slug)
    value = _validated(slug, data)
    emp = require_employee(value["employee_id"])

    if kind.is_span and value.get("total_days") is None:
        value["total_days"] = day_count(value["start_date"], value["end_date"])
    if "rate" in value and not _supplied(data, "rate"):
        value["rate"] = Decimal(str(current_app.config.get(
            "PAYROLL_DEFAULT_OVERTIME_RATE", DEFAULT_OVERTIME_RATE)))

    rec = PayrollRecord(**value, created_by=user_id, created_at=datetime.utcnow())
    db.session.add(rec)
    log_activity(
        user_id,
        f"Create {kind.label} Record",
        f"Created {kind.describe(rec.record_type, rec.details)} record for {emp.full_name}",
    )
    commit(f"{kind.label.lower()} record")
    log.info("created %s id=%s employee=%s", rec.record_type, rec.id, emp.id)
    return row(rec)


def update_record(slug, record_id, data, user_id):
    kind = get_kind(slug)
    rec = _load(kind, record_id)
    value = _validated(slug, data, partial=True)

    if "employee_id" in value and value["employee_id"] != rec.employee_id:
        require_employee(value["employee_id"])

    if kind.is_span:
        start = value.get("start_date", rec.start_date)
        end = value.get("end_date", rec.end_date)
        if start and end and start > end:
            raise ValidationError.single("end_date", "end_date must be on or after start_date")
        # a resent but unchanged span keeps a hand-entered total_days
        dates_changed = _differs(rec.start_date, start) or _differs(rec.end_date, end)
        if dates_changed and "total_days" not in value and start and end:
            value["total_days"] = day_count(start, end)

    changed = {k: v for k, v in value.items() if _differs(getattr(rec, k), v)}
    if not changed:
        return row(rec)

    for k, v in changed.items():
        setattr(rec, k, v)
    emp = db.session.get(Employee, rec.employee_id)
    log_activity(
        user_id,
        f"Update {kind.label} Record",
        f"Updated {kind.describe(rec.record_type, rec.details)} record for "
        f"{emp.full_name if emp else rec.employee_id} ({', '.join(sorted(changed))})",
    )
    commit(f"{kind.label.lower()} record")
    return row(rec)


def delete_record(slug, record_id, user_id):
    kind = get_kind(slug)
    rec = _load(kind, record_id)
    label = kind.describe(rec.record_type, rec.details)
    name = rec.employee.full_name if rec.employee else rec.employee_id

    db.session.delete(rec)
    log_activity(user_id, f"Delete {kind.label} Record", f"Deleted {label} record for {name}")
    commit(f"{kind.label.lower()} record")
    return {"id": record_id, "deleted": True}


def get_record(slug, record_id):
    return row(_load(get_kind(slug), record_id))


def list_records(slug, filters=None):
    """
    Filters: company, start_date/end_date (inclusive, on `date`), record_type,
    employee_id, status, approved, recurring. Newest first; not paginated.
    """
    kind = get_kind(slug)
    f = filters or {}

    q = (
        PayrollRecord.query
        .join(PayrollRecord.employee)
        .options(contains_eager(PayrollRecord.employee))
        .filter(PayrollRecord.record_type.in_(kind.record_types))
    )
    if f.get("record_type"):
        q = q.filter(PayrollRecord.record_type == f["record_type"])
    if f.get("company"):
        q = q.filter(Employee.company == f["company"])
    if f.get("start_date"):
        q = q.filter(PayrollRecord.date >= f["start_date"])
    if f.get("end_date"):
        q = q.filter(PayrollRecord.date <= f["end_date"])
    if f.get("employee_id"):
        q = q.filter(PayrollRecord.employee_id == f["employee_id"])
    if f.get("status"):
        q = q.filter(PayrollRecord.status == f["status"])
    if f.get("approved") is not None:
        q = q.filter(PayrollRecord.approved.is_(f["approved"]))
    if f.get("recurring") is not None:
        q = q.filter(PayrollRecord.recurring.is_(f["recurring"]))

    q = q.order_by(PayrollRecord.date.desc(), PayrollRecord.id.desc())
    return [row(r) for r in q.all()]


def summarize(rows, field="amount"):
    """Reduce an already-filtered list into dashboard-card numbers."""
    total = Decimal("0")
    by_company = {c: Decimal("0") for c in COMPANIES}
    approved = recurring = 0
    for r in rows:
        v = Decimal(str(r.get(field) or 0))
        total += v
        if r.get("company") in by_company:
            by_company[r["company"]] += v
        if r.get("approved") or r.get("status") == "Approved":
            approved += 1
        if r.get("recurring"):
            recurring += 1
    return {
        "field": field,
        "total": float(total),
        "by_company": {c: float(v) for c, v in by_company.items()},
        "count": len(rows),
        "approved_count": approved,
        "recurring_count": recurring,
    }


# ---------- archive ----------

def archive_records(record_types, user_id):
    """
    Move every active row of the given types into archived_payroll_records.
    Copy + delete + activity entry commit together or not at all.
    """
    value = _validated("archive-records", {"record_types": record_types})
    types = list(dict.fromkeys(value["record_types"]))
    by_type = {t: 0 for t in types}
    now = datetime.utcnow()

    for rec in PayrollRecord.query.filter(PayrollRecord.record_type.in_(types)).all():
        copy = {c: getattr(rec, c) for c in ArchivedPayrollRecord.COPIED}
        db.session.add(ArchivedPayrollRecord(
            original_id=rec.id, archived_at=now, archived_by=user_id, **copy))
        db.session.delete(rec)
        by_type[rec.record_type] += 1

    archived = sum(by_type.values())
    log_activity(
        user_id,
        "Archive Records",
        f"Archived {archived} records ({', '.join(f'{t}: {n}' for t, n in by_type.items())})",
    )
    commit("archive batch")
    log.info("archived %s payroll records %s", archived, by_type)
    return {"archived": archived, "by_type": by_type}


def _archived_row(a: ArchivedPayrollRecord):
    emp = a.employee
    return {
        "id": a.id,
        "original_id": a.original_id,
        "employee_id": a.employee_id,
        "employee_name": emp.full_name if emp else None,
        "company": emp.company if emp else None,
        "record_type": a.record_type,
        "date": iso(a.date),
        "amount": _num(a.amount),
        "hours": _num(a.hours),
        "rate": _num(a.rate),
        "start_date": iso(a.start_date),
        "end_date": iso(a.end_date),
        "total_days": _num(a.total_days),
        "status": a.status,
        "approved": bool(a.approved),
        "recurring": bool(a.recurring),
        "details": a.details,
        "description": a.description,
        "notes": a.notes,
        "created_by": a.created_by,
        "created_at": iso(a.created_at),
        "archived_at": iso(a.archived_at),
        "archived_by": a.archived_by,
    }


def list_archived_records(filters=None):
    f = filters or {}
    q = ArchivedPayrollRecord.query.outerjoin(ArchivedPayrollRecord.employee).options(
        contains_eager(ArchivedPayrollRecord.employee))
    if f.get("record_type"):
        q = q.filter(ArchivedPayrollRecord.record_type == f["record_type"])
    if f.get("company"):
        q = q.filter(Employee.company == f["company"])
    if f.get("employee_id"):
        q = q.filter(ArchivedPayrollRecord.employee_id == f["employee_id"])
    if f.get("start_date"):
        q = q.filter(ArchivedPayrollRecord.date >= f["start_date"])
    if f.get("end_date"):
        q = q.filter(ArchivedPayrollRecord.date <= f["end_date"])
    q = q.order_by(ArchivedPayrollRecord.archived_at.desc(), ArchivedPayrollRecord.id.desc())
    return [_archived_row(a) for a in q.all()]


# ---------- dashboard ----------

def dashboard_summary():
    active = Employee.query.filter(Employee.status != "Terminated")
    per_company = dict(
        db.session.query(Employee.company, db.func.count(Employee.id))
        .filter(Employee.status != "Terminated")
        .group_by(Employee.company)
        .all()
    )
    pending_leave = PayrollRecord.query.filter(
        PayrollRecord.record_type.in_(("Leave", "Maternity Leave")),
        PayrollRecord.status == "Pending",
    ).count()
    overtime_hours = (
        db.session.query(db.func.coalesce(db.func.sum(PayrollRecord.hours), 0))
        .filter(PayrollRecord.record_type == "Overtime")
        .scalar()
    )
    return {
        "employee_count": active.count(),
        "employees_by_company": {c: int(per_company.get(c, 0)) for c in COMPANIES},
        "pending_leave_count": pending_leave,
        "overtime_hours": float(overtime_hours or 0),
        "last_updated": datetime.utcnow().isoformat(),
    }
