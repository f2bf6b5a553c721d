from flask import Blueprint

from payroll_api.common.auth import ALL_ROLES, WRITE_ROLES, current_user_id, requires_roles
from payroll_api.common.http import json_body, ok
from payroll_api.common.listing import list_filters
from payroll_api.schemas.payroll_records import DEDUCTION_TYPES
from payroll_api.services import recurring_deductions as svc

bp = Blueprint("recurring_deductions", __name__, url_prefix="/api/recurring-deductions")


@bp.get("")
@requires_roles(*ALL_ROLES)
def list_deductions():
    rows = svc.list_deductions(list_filters(choices={"deduction_name": DEDUCTION_TYPES}))
    return ok(rows, total=len(rows))


@bp.get("/<int:did>")
@requires_roles(*ALL_ROLES)
def get_deduction(did):
    return ok(svc.get_deduction(did))


@bp.post("")
@requires_roles(*WRITE_ROLES)
def create_deduction():
    return ok(svc.create_deduction(json_body(), current_user_id()), status=201)


@bp.route("/<int:did>", methods=["PUT", "PATCH"])
@requires_roles(*WRITE_ROLES)
def update_deduction(did):
    return ok(svc.update_deduction(did, json_body(), current_user_id()))


@bp.delete("/<int:did>")
@requires_roles(*WRITE_ROLES)
def delete_deduction(did):
    return ok(svc.delete_deduction(did, current_user_id()))
