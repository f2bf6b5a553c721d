from flask import request
from sqlalchemy import or_

from payroll_api.common.dates import parse_date
from payroll_api.common.errors import ValidationError
from payroll_api.models.employee import COMPANIES, DEPARTMENTS

# enum-backed filters shared by every list endpoint; callers add their own
DEFAULT_CHOICES = {"company": COMPANIES, "department": DEPARTMENTS}


def apply_q_search(query, *cols, q=None):
    q = (q if q is not None else request.args.get("q") or "").strip().lower()
    if not q: return query
    like = f"%{q}%"
    return query.filter(or_(*[c.ilike(like) for c in cols]))


def _truthy(v):
    return str(v).strip().lower() in ("1", "true", "yes", "y")


def check_choice(field, value, allowed):
    if value not in allowed:
        raise ValidationError.single(field, f"{field} must be one of: {', '.join(allowed)}")
    return value


def list_filters(args=None, choices=None):
    """
    Pull the common list filters from a query string into a plain dict.
    Blank and "all" values are dropped so services only see what was asked for.
    Values outside `choices` and dates that do not parse are a 422, never a silent no-op.
    """
    args = request.args if args is None else args
    choices = {**DEFAULT_CHOICES, **(choices or {})}
    out = {}
    for key in ("company", "record_type", "status", "department", "deduction_name", "q"):
        v = (args.get(key) or args.get(_camel(key)) or "").strip()
        if not v or v.lower() == "all":
            continue
        if key in choices:
            check_choice(key, v, choices[key])
        out[key] = v
    for key in ("start_date", "end_date", "month"):
        raw = (args.get(key) or args.get(_camel(key)) or "").strip()
        if not raw:
            continue
        d = parse_date(raw)
        if d is None:
            raise ValidationError.single(key, f"{key} must be a valid date (YYYY-MM-DD)")
        out[key] = d
    emp = (args.get("employee_id") or args.get("employeeId") or "").strip()
    if emp:
        if not emp.isdigit():
            raise ValidationError.single("employee_id", "employee_id must be a whole number")
        out["employee_id"] = int(emp)
    for key in ("active", "approved", "recurring"):
        v = args.get(key)
        if v not in (None, ""):
            out[key] = _truthy(v)
    return out


def _camel(key):
    head, *rest = key.split("_")
    return head + "".join(p.title() for p in rest)
