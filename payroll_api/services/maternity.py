from payroll_api.common.dates import day_count, iso
from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.common.tx import commit
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.maternity import MaternityRecord
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity
from payroll_api.services.payroll_records import require_employee

SLUG = "maternity-records"


def _row(m: MaternityRecord):
    emp = m.employee
    return {
        "id": m.id,
        "employee_id": m.employee_id,
        "employee_name": emp.full_name if emp else None,
        "employee_code": emp.employee_code if emp else None,
        "company": emp.company if emp else None,
        "from_date": iso(m.from_date),
        "to_date": iso(m.to_date),
        "total_days": day_count(m.from_date, m.to_date) if m.from_date and m.to_date else None,
        "comments": m.comments,
        "created_at": iso(m.created_at),
        "updated_at": iso(m.updated_at),
    }


def _load(record_id) -> MaternityRecord:
    m = db.session.get(MaternityRecord, record_id)
    if m is None:
        raise NotFoundError(f"Maternity record {record_id} not found")
    return m


def create_maternity(data, user_id):
    res = validate_record(SLUG, data)
    if not res.ok:
        raise ValidationError(res.errors)
    emp = require_employee(res.value["employee_id"])
    m = MaternityRecord(**res.value)
    db.session.add(m)
    log_activity(user_id, "Create Maternity Record",
                 f"Created maternity record for {emp.full_name} "
                 f"({res.value['from_date']} to {res.value['to_date']})")
    commit("maternity record")
    return _row(m)


def update_maternity(record_id, data, user_id):
    m = _load(record_id)
    res = validate_record(SLUG, data, partial=True)
    if not res.ok:
        raise ValidationError(res.errors)
    value = res.value
    if "employee_id" in value and value["employee_id"] != m.employee_id:
        require_employee(value["employee_id"])
    start = value.get("from_date", m.from_date)
    end = value.get("to_date", m.to_date)
    if start > end:
        raise ValidationError.single("to_date", "to_date must be on or after from_date")

    changed = [k for k, v in value.items() if getattr(m, k) != v]
    if changed:
        for k in changed:
            setattr(m, k, value[k])
        log_activity(user_id, "Update Maternity Record",
                     f"Updated maternity record {m.id} ({', '.join(sorted(changed))})")
        commit("maternity record")
    return _row(m)


def delete_maternity(record_id, user_id):
    m = _load(record_id)
    db.session.delete(m)
    log_activity(user_id, "Delete Maternity Record", f"Deleted maternity record {record_id}")
    commit("maternity record")
    return {"id": record_id, "deleted": True}


def get_maternity(record_id):
    return _row(_load(record_id))


def list_maternity(filters=None):
    f = filters or {}
    q = MaternityRecord.query.join(Employee, Employee.id == MaternityRecord.employee_id)
    if f.get("employee_id"):
        q = q.filter(MaternityRecord.employee_id == f["employee_id"])
    if f.get("company"):
        q = q.filter(Employee.company == f["company"])
    # spans overlapping the requested window
    if f.get("start_date"):
        q = q.filter(MaternityRecord.to_date >= f["start_date"])
    if f.get("end_date"):
        q = q.filter(MaternityRecord.from_date <= f["end_date"])
    q = q.order_by(MaternityRecord.from_date.desc(), MaternityRecord.id.desc())
    return [_row(m) for m in q.all()]
