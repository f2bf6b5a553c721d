# payroll_api/services/policies.py
"""
Insurance policies and the monthly payments recorded against them.
A policy owns its payments; deleting a policy removes them.
"""
import logging
import re
from datetime import datetime
from decimal import Decimal

from payroll_api.common.dates import iso
from payroll_api.common.errors import NotFoundError, PersistenceError, ValidationError
from payroll_api.common.tx import commit, flush
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.insurance import INSURERS, POLICY_STATUSES, InsurancePolicy, PolicyExport, PolicyPayment
from payroll_api.models.user import User
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity
from payroll_api.services.employees import normalize_row
from payroll_api.services.payroll_records import require_employee

log = logging.getLogger(__name__)


def _money(v):
    return float(v) if v is not None else None


def payment_row(p: PolicyPayment):
    return {
        "id": p.id,
        "policy_id": p.policy_id,
        "payment_date": iso(p.payment_date),
        "amount": _money(p.amount),
        "payment_method": p.payment_method,
        "month": iso(p.month),
        "notes": p.notes,
        "created_by": p.created_by,
        "created_at": iso(p.created_at),
    }


def policy_row(p: InsurancePolicy, with_payments=False):
    emp = p.employee
    out = {
        "id": p.id,
        "employee_id": p.employee_id,
        "employee_name": emp.full_name if emp else None,
        "employee_code": emp.employee_code if emp else None,
        "employee_company": emp.company if emp else None,
        "company": p.company,
        "policy_number": p.policy_number,
        "amount": _money(p.amount),
        "start_date": iso(p.start_date),
        "end_date": iso(p.end_date),
        "status": p.status,
        "notes": p.notes,
        "document_image": p.document_image,
        "created_by": p.created_by,
        "created_at": iso(p.created_at),
        "updated_by": p.updated_by,
        "updated_at": iso(p.updated_at),
    }
    if with_payments:
        out["payments"] = [payment_row(x) for x in p.payments]
    return out


def _validated(slug, data, partial=False):
    res = validate_record(slug, data, partial=partial)
    if not res.ok:
        raise ValidationError(res.errors)
    return res.value


def _load(policy_id) -> InsurancePolicy:
    p = db.session.get(InsurancePolicy, policy_id)
    if p is None:
        raise NotFoundError(f"Policy {policy_id} not found")
    return p


# ---------- policies ----------

def create_policy(data, user_id):
    value = _validated("policies", data)
    emp = require_employee(value["employee_id"])
    p = InsurancePolicy(**value, created_by=user_id)
    db.session.add(p)
    log_activity(user_id, "Create Insurance Policy",
                 f"Created {p.company} policy {p.policy_number} for {emp.full_name}")
    commit("policy")
    return policy_row(p)


def update_policy(policy_id, data, user_id):
    p = _load(policy_id)
    value = _validated("policies", data, partial=True)
    if "employee_id" in value and value["employee_id"] != p.employee_id:
        require_employee(value["employee_id"])
    start = value.get("start_date", p.start_date)
    end = value.get("end_date", p.end_date)
    if start and end and start > end:
        raise ValidationError.single("end_date", "end_date must be on or after start_date")

    changed = [k for k, v in value.items() if getattr(p, k) != v]
    if not changed:
        return policy_row(p)
    for k in changed:
        setattr(p, k, value[k])
    p.updated_by = user_id
    p.updated_at = datetime.utcnow()
    log_activity(user_id, "Update Insurance Policy",
                 f"Updated policy {p.policy_number} ({', '.join(sorted(changed))})")
    commit("policy")
    return policy_row(p)


def delete_policy(policy_id, user_id):
    p = _load(policy_id)
    number, n_payments = p.policy_number, len(p.payments)
    db.session.delete(p)
    log_activity(user_id, "Delete Insurance Policy",
                 f"Deleted policy {number} and {n_payments} payment(s)")
    commit("policy")
    return {"id": policy_id, "deleted": True, "payments_deleted": n_payments}


def get_policy(policy_id):
    return policy_row(_load(policy_id), with_payments=True)


def list_policies(filters=None):
    """Filters: employee_id, company (insurer), status, employee_company (Butters/Makana)."""
    f = filters or {}
    q = InsurancePolicy.query.join(Employee, Employee.id == InsurancePolicy.employee_id)
    if f.get("employee_id"):
        q = q.filter(InsurancePolicy.employee_id == f["employee_id"])
    if f.get("insurer"):
        q = q.filter(InsurancePolicy.company == f["insurer"])
    if f.get("status"):
        q = q.filter(InsurancePolicy.status == f["status"])
    if f.get("employee_company"):
        q = q.filter(Employee.company == f["employee_company"])
    q = q.order_by(InsurancePolicy.start_date.desc(), InsurancePolicy.id.desc())
    return [policy_row(p) for p in q.all()]


# ---------- payments ----------

def add_payment(policy_id, data, user_id):
    p = db.session.get(InsurancePolicy, policy_id)
    if p is None:
        raise PersistenceError(f"Policy {policy_id} does not exist", payload={"policy_id": policy_id})
    value = _validated("policy-payments", data)
    pay = PolicyPayment(**value, policy_id=p.id, created_by=user_id)
    db.session.add(pay)
    log_activity(user_id, "Record Policy Payment",
                 f"Recorded {value['month']:%B %Y} payment for policy {p.policy_number}")
    commit("policy payment")
    return payment_row(pay)


def list_payments(policy_id):
    p = _load(policy_id)
    return [payment_row(x) for x in p.payments]


def _load_payment(payment_id) -> PolicyPayment:
    pay = db.session.get(PolicyPayment, payment_id)
    if pay is None:
        raise NotFoundError(f"Payment {payment_id} not found")
    return pay


def update_payment(payment_id, data, user_id):
    pay = _load_payment(payment_id)
    value = _validated("policy-payments", data, partial=True)
    changed = [k for k, v in value.items() if getattr(pay, k) != v]
    if not changed:
        return payment_row(pay)
    for k in changed:
        setattr(pay, k, value[k])
    log_activity(user_id, "Update Policy Payment",
                 f"Updated payment {pay.id} ({', '.join(sorted(changed))})")
    commit("policy payment")
    return payment_row(pay)


def delete_payment(payment_id, user_id):
    pay = _load_payment(payment_id)
    db.session.delete(pay)
    log_activity(user_id, "Delete Policy Payment", f"Deleted payment {payment_id}")
    commit("policy payment")
    return {"id": payment_id, "deleted": True}


def policy_report(month=None, employee_company=None):
    """
    Per-insurer totals: active policies, premium total, and (for `month`) what was paid.
    """
    q = InsurancePolicy.query.join(Employee, Employee.id == InsurancePolicy.employee_id)
    if employee_company:
        q = q.filter(Employee.company == employee_company)
    policies = q.all()

    report = {
        ins: {"policies": 0, "active": 0, "premium_total": Decimal("0"),
              "paid_total": Decimal("0"), "payments": 0}
        for ins in INSURERS
    }
    month = month.replace(day=1) if month else None
    for p in policies:
        bucket = report[p.company]
        bucket["policies"] += 1
        if p.status == "Active":
            bucket["active"] += 1
            bucket["premium_total"] += p.amount or 0
        for pay in p.payments:
            if month is None or pay.month == month:
                bucket["paid_total"] += pay.amount or 0
                bucket["payments"] += 1

    return {
        "month": iso(month),
        "company": employee_company,
        "insurers": {
            ins: {**b, "premium_total": float(b["premium_total"]), "paid_total": float(b["paid_total"])}
            for ins, b in report.items()
        },
    }


# ---------- policy export history ----------

def export_row(x: PolicyExport, user_name=None):
    return {
        "id": x.id,
        "export_name": x.export_name,
        "company": x.company,
        "month": iso(x.month),
        "total_amount": _money(x.total_amount),
        "format": x.format,
        "created_by": x.created_by,
        "user_name": user_name or "Unknown User",
        "created_at": iso(x.created_at),
    }


def create_policy_export(data, user_id):
    value = _validated("policy-exports", data)
    x = PolicyExport(**value, created_by=user_id)
    db.session.add(x)
    log_activity(user_id, "Export Policies",
                 f"Exported {x.company or 'all insurers'} schedule for {value['month']:%B %Y} "
                 f"as {x.format.upper()}")
    commit("policy export")
    user = db.session.get(User, user_id)
    return export_row(x, user.full_name if user else None)


def list_policy_exports(user_id=None, company=None):
    q = (
        db.session.query(PolicyExport, User.full_name)
        .outerjoin(User, User.id == PolicyExport.created_by)
    )
    if user_id is not None:
        q = q.filter(PolicyExport.created_by == user_id)
    if company:
        q = q.filter(PolicyExport.company == company)
    q = q.order_by(PolicyExport.created_at.desc(), PolicyExport.id.desc())
    return [export_row(x, name) for x, name in q.all()]


# ---------- bulk import ----------

# snake_case header (see employees.read_rows) -> field
IMPORT_HEADERS = {
    "employee_code": ("employee_code", "employee", "employeecode", "code", "employee_id", "employeeid"),
    "first_name": ("first_name", "firstname", "fname", "name"),
    "last_name": ("last_name", "lastname", "lname", "surname"),
    "company": ("company", "insurance_company", "insurancecompany", "insurer", "provider"),
    "amount": ("amount", "value", "premium", "fee"),
    "notes": ("notes", "comment", "description", "details"),
    "policy_number": ("policy_number", "policynumber", "policy_no"),
    "status": ("status", "policy_status", "policystatus"),
    "start_date": ("start_date", "startdate"),
}
# spellings seen in insurer spreadsheets
INSURER_ALIASES = {"old mutul": "Old Mutual"}
POLICY_NUMBER_IN_NOTES = re.compile(r"POLICY\s+NUMBER[:\s]+([^\s,]+)", re.I)


def _pick(raw: dict, field):
    for header in IMPORT_HEADERS[field]:
        v = raw.get(header)
        if v not in (None, ""):
            return str(v).strip()
    return None


def map_import_row(raw: dict) -> dict:
    """Spreadsheet row -> policy fields. Unparseable values are left for the schema to reject."""
    out = {f: _pick(raw, f) for f in IMPORT_HEADERS}

    company = out["company"]
    if company:
        out["company"] = INSURER_ALIASES.get(company.lower(), company)
    if out["amount"]:
        # "R 1,250.00" -> "1250.00"
        out["amount"] = re.sub(r"^[Rr]\s*", "", out["amount"]).replace(",", "").replace(" ", "")
    if not out["policy_number"] and out["notes"]:
        m = POLICY_NUMBER_IN_NOTES.search(out["notes"])
        if m:
            out["policy_number"] = m.group(1)
    status = (out["status"] or "").title()
    out["status"] = status if status in POLICY_STATUSES else "Cancelled"
    return out


def _find_employee(mapped) -> Employee | None:
    if mapped["employee_code"]:
        e = Employee.query.filter(Employee.employee_code == mapped["employee_code"]).first()
        if e:
            return e
    if mapped["first_name"] and mapped["last_name"]:
        return (
            Employee.query
            .filter(Employee.first_name.ilike(mapped["first_name"]),
                    Employee.last_name.ilike(mapped["last_name"]))
            .first()
        )
    return None


def import_policies(rows, user_id, update_existing=True, add_new=True):
    """
    Match each row to an employee (code, then first + last name) and to an existing
    policy (same employee, insurer and policy number). Matches are updated, the rest
    created; either can be switched off. Row numbers are 1-based data rows.
    """
    created = updated = skipped = 0
    errors = []
    for idx, raw in enumerate(rows or [], start=1):
        if not isinstance(raw, dict):
            errors.append({"row": idx, "errors": [{"field": "__all__", "message": "Expected an object"}]})
            continue
        mapped = map_import_row(normalize_row(raw))
        emp = _find_employee(mapped)
        if emp is None:
            who = mapped["employee_code"] or f"{mapped['first_name'] or ''} {mapped['last_name'] or ''}".strip()
            errors.append({"row": idx, "errors": [
                {"field": "employee_code", "message": f"No employee matches {who or 'this row'}"}]})
            continue

        fields = {k: mapped[k] for k in ("company", "policy_number", "amount", "status", "start_date", "notes")
                  if mapped[k] is not None}
        res = validate_record("policy-import-rows", fields)
        if not res.ok:
            errors.append({"row": idx, "errors": res.errors})
            continue
        value = res.value

        existing = InsurancePolicy.query.filter_by(
            employee_id=emp.id, company=value["company"], policy_number=value["policy_number"],
        ).first()
        if existing is not None:
            if not update_existing:
                skipped += 1
                continue
            # start_date from a file without the column would reset the original start
            value = {k: v for k, v in value.items() if k in fields}
            changed = [k for k, v in value.items() if getattr(existing, k) != v]
            if changed:
                for k in changed:
                    setattr(existing, k, value[k])
                existing.updated_by = user_id
                existing.updated_at = datetime.utcnow()
                updated += 1
        elif add_new:
            db.session.add(InsurancePolicy(**value, employee_id=emp.id, created_by=user_id))
            flush("policy import")
            created += 1
        else:
            skipped += 1

    log_activity(user_id, "Import Policies",
                 f"Imported policies: {created} created, {updated} updated, "
                 f"{skipped} skipped, {len(errors)} rejected")
    commit("policy import")
    log.info("policy import created=%s updated=%s skipped=%s rejected=%s",
             created, updated, skipped, len(errors))
    return {"created": created, "updated": updated, "skipped": skipped,
            "rejected": len(errors), "errors": errors}
