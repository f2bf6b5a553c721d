from decimal import Decimal

from payroll_api.common.dates import iso
from payroll_api.common.errors import NotFoundError, PersistenceError, ValidationError
from payroll_api.common.tx import commit
from payroll_api.extensions import db
from payroll_api.models.overtime_rate import DEFAULT_OVERTIME_RATES, OVERTIME_RATE_TYPES, OvertimeRate
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity

SLUG = "overtime-rates"


def _row(r: OvertimeRate):
    return {
        "id": r.id,
        "overtime_type": r.overtime_type,
        "rate": float(r.rate),
        "description": r.description,
        "updated_by": r.updated_by,
        "updated_at": iso(r.updated_at),
    }


def _load(rate_id) -> OvertimeRate:
    r = db.session.get(OvertimeRate, rate_id)
    if r is None:
        raise NotFoundError(f"Overtime rate {rate_id} not found")
    return r


def list_rates():
    order = {t: i for i, t in enumerate(OVERTIME_RATE_TYPES)}
    rows = OvertimeRate.query.all()
    return [_row(r) for r in sorted(rows, key=lambda r: order.get(r.overtime_type, 99))]


def create_rate(data, user_id):
    res = validate_record(SLUG, data)
    if not res.ok:
        raise ValidationError(res.errors)
    if OvertimeRate.query.filter_by(overtime_type=res.value["overtime_type"]).first():
        raise PersistenceError(f"A rate for {res.value['overtime_type']} already exists")
    r = OvertimeRate(**res.value, updated_by=user_id)
    db.session.add(r)
    log_activity(user_id, "Create Overtime Rate", f"Set {r.overtime_type} overtime to {r.rate}x")
    commit("overtime rate")
    return _row(r)


def update_rate(rate_id, data, user_id):
    r = _load(rate_id)
    res = validate_record(SLUG, data, partial=True)
    if not res.ok:
        raise ValidationError(res.errors)
    value = res.value
    if "overtime_type" in value and value["overtime_type"] != r.overtime_type:
        if OvertimeRate.query.filter_by(overtime_type=value["overtime_type"]).first():
            raise PersistenceError(f"A rate for {value['overtime_type']} already exists")
    changed = [k for k, v in value.items() if getattr(r, k) != v]
    if changed:
        for k in changed:
            setattr(r, k, value[k])
        r.updated_by = user_id
        log_activity(user_id, "Update Overtime Rate", f"Set {r.overtime_type} overtime to {r.rate}x")
        commit("overtime rate")
    return _row(r)


def delete_rate(rate_id, user_id):
    r = _load(rate_id)
    kind = r.overtime_type
    db.session.delete(r)
    log_activity(user_id, "Delete Overtime Rate", f"Removed {kind} overtime rate")
    commit("overtime rate")
    return {"id": rate_id, "deleted": True}


def seed_default_rates(user_id):
    """Insert the standard multipliers that are missing; existing rows are left as they are."""
    have = {r.overtime_type for r in OvertimeRate.query.all()}
    added = []
    for kind, rate in DEFAULT_OVERTIME_RATES.items():
        if kind in have:
            continue
        db.session.add(OvertimeRate(overtime_type=kind, rate=Decimal(str(rate)), updated_by=user_id))
        added.append(kind)
    commit("overtime rates")
    return added
