import logging

from payroll_api.common.dates import iso
from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.common.tx import commit, flush
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.recurring_deduction import RecurringDeduction
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity
from payroll_api.services.payroll_records import require_employee

log = logging.getLogger(__name__)

SLUG = "recurring-deductions"


def reference_number(deduction_id: int) -> str:
    """RD + zero-padded id, e.g. 42 -> RD000042."""
    return f"RD{deduction_id:06d}"


def _row(d: RecurringDeduction):
    emp = d.employee
    return {
        "id": d.id,
        "employee_id": d.employee_id,
        "employee_name": emp.full_name if emp else None,
        "employee_code": emp.employee_code if emp else None,
        "company": emp.company if emp else None,
        "deduction_name": d.deduction_name,
        "amount": float(d.amount) if d.amount is not None else None,
        "start_date": iso(d.start_date),
        "end_date": iso(d.end_date),
        "frequency": d.frequency,
        "description": d.description,
        "approved": bool(d.approved),
        "reference_number": d.reference_number,
        "document_image": d.document_image,
        "notes": d.notes,
        "active": bool(d.active),
        "created_by": d.created_by,
        "created_at": iso(d.created_at),
        "updated_at": iso(d.updated_at),
    }


def _load(deduction_id) -> RecurringDeduction:
    d = db.session.get(RecurringDeduction, deduction_id)
    if d is None:
        raise NotFoundError(f"Recurring deduction {deduction_id} not found")
    return d


def create_deduction(data, user_id):
    res = validate_record(SLUG, data)
    if not res.ok:
        raise ValidationError(res.errors)
    emp = require_employee(res.value["employee_id"])

    d = RecurringDeduction(**res.value, created_by=user_id)
    db.session.add(d)
    flush("recurring deduction")           # need the id for the reference
    d.reference_number = reference_number(d.id)

    log_activity(
        user_id,
        "Create Recurring Deduction",
        f"Created {d.deduction_name} recurring deduction {d.reference_number} for {emp.full_name}",
    )
    commit("recurring deduction")
    return _row(d)


def update_deduction(deduction_id, data, user_id):
    d = _load(deduction_id)
    res = validate_record(SLUG, data, partial=True)
    if not res.ok:
        raise ValidationError(res.errors)
    value = res.value

    if "employee_id" in value and value["employee_id"] != d.employee_id:
        require_employee(value["employee_id"])
    start = value.get("start_date", d.start_date)
    end = value.get("end_date", d.end_date)
    if start and end and start > end:
        raise ValidationError.single("end_date", "end_date must be on or after start_date")

    changed = [k for k, v in value.items() if getattr(d, k) != v]
    if not changed:
        return _row(d)
    for k in changed:
        setattr(d, k, value[k])
    log_activity(user_id, "Update Recurring Deduction",
                 f"Updated recurring deduction {d.reference_number} ({', '.join(sorted(changed))})")
    commit("recurring deduction")
    return _row(d)


def delete_deduction(deduction_id, user_id):
    d = _load(deduction_id)
    ref = d.reference_number
    db.session.delete(d)
    log_activity(user_id, "Delete Recurring Deduction", f"Deleted recurring deduction {ref}")
    commit("recurring deduction")
    return {"id": deduction_id, "deleted": True}


def get_deduction(deduction_id):
    return _row(_load(deduction_id))


def list_deductions(filters=None):
    f = filters or {}
    q = RecurringDeduction.query.join(Employee, Employee.id == RecurringDeduction.employee_id)
    if f.get("employee_id"):
        q = q.filter(RecurringDeduction.employee_id == f["employee_id"])
    if f.get("deduction_name"):
        q = q.filter(RecurringDeduction.deduction_name == f["deduction_name"])
    if f.get("active") is not None:
        q = q.filter(RecurringDeduction.active.is_(f["active"]))
    if f.get("approved") is not None:
        q = q.filter(RecurringDeduction.approved.is_(f["approved"]))
    if f.get("company"):
        q = q.filter(Employee.company == f["company"])
    q = q.order_by(RecurringDeduction.start_date.desc(), RecurringDeduction.id.desc())
    return [_row(d) for d in q.all()]
