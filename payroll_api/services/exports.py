# payroll_api/services/exports.py
"""
Export history and the data a report renderer needs.
Rendering CSV/XLSX files happens client side; only metadata is stored here.
"""
import logging

from sqlalchemy.orm import contains_eager

from payroll_api.common.dates import iso, month_bounds
from payroll_api.common.errors import ValidationError
from payroll_api.common.tx import commit
from payroll_api.extensions import db
from payroll_api.models.audit import ExportRecord
from payroll_api.models.employee import Employee
from payroll_api.models.payroll_record import PayrollRecord
from payroll_api.models.user import User
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity
from payroll_api.services import employees as employee_svc
from payroll_api.services.payroll_records import row as record_row

log = logging.getLogger(__name__)


def _row(x: ExportRecord, user_name=None):
    return {
        "id": x.id,
        "user_id": x.user_id,
        "user_name": user_name,
        "export_type": x.export_type,
        "file_url": x.file_url,
        "file_format": x.file_format,
        "start_date": iso(x.start_date),
        "end_date": iso(x.end_date),
        "include_unapproved": bool(x.include_unapproved),
        "record_count": x.record_count,
        "created_at": iso(x.created_at),
    }


def create_export(data, user_id):
    res = validate_record("export-records", data)
    if not res.ok:
        raise ValidationError(res.errors)
    x = ExportRecord(**res.value, user_id=user_id)
    db.session.add(x)
    log_activity(user_id, "Export Records",
                 f"Exported {x.record_count} {x.export_type} records as {x.file_format.upper()}")
    commit("export record")
    return _row(x)


def list_exports(limit=50):
    rows = (
        db.session.query(ExportRecord, User.full_name)
        .outerjoin(User, User.id == ExportRecord.user_id)
        .order_by(ExportRecord.created_at.desc(), ExportRecord.id.desc())
        .limit(limit)
        .all()
    )
    return [_row(x, name) for x, name in rows]


def report_data(data):
    """
    Everything a monthly payroll sheet needs in one call:
      - active employees (optionally one company)
      - that month's records of the requested types (all types when none given)
    Unapproved records are included unless include_unapproved is false.
    """
    res = validate_record("reports", data)
    if not res.ok:
        raise ValidationError(res.errors)
    value = res.value
    start, end = month_bounds(value["month"])
    company = value.get("company")

    emp_q = Employee.query.filter(Employee.status != "Terminated")
    if company:
        emp_q = emp_q.filter(Employee.company == company)
    employees = [employee_svc.row(e) for e in emp_q.order_by(Employee.employee_code.asc()).all()]

    rec_q = (
        PayrollRecord.query
        .join(PayrollRecord.employee)
        .options(contains_eager(PayrollRecord.employee))
        .filter(PayrollRecord.date >= start, PayrollRecord.date <= end)
    )
    if value["record_types"]:
        rec_q = rec_q.filter(PayrollRecord.record_type.in_(value["record_types"]))
    if company:
        rec_q = rec_q.filter(Employee.company == company)
    if not value["include_unapproved"]:
        rec_q = rec_q.filter(PayrollRecord.status == "Approved")
    records = [record_row(r) for r in rec_q.order_by(PayrollRecord.employee_id, PayrollRecord.date).all()]

    return {
        "month": iso(start),
        "start_date": iso(start),
        "end_date": iso(end),
        "company": company,
        "employees": employees,
        "records": records,
    }
