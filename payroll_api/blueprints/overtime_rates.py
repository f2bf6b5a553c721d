from flask import Blueprint

from payroll_api.common.auth import ADMIN_ONLY, ALL_ROLES, current_user_id, requires_roles
from payroll_api.common.http import json_body, ok
from payroll_api.services import overtime_rates as svc

bp = Blueprint("overtime_rates", __name__, url_prefix="/api/overtime-rates")


@bp.get("")
@requires_roles(*ALL_ROLES)
def list_rates():
    return ok(svc.list_rates())


@bp.post("")
@requires_roles(*ADMIN_ONLY)
def create_rate():
    return ok(svc.create_rate(json_body(), current_user_id()), status=201)


@bp.route("/<int:rid>", methods=["PUT", "PATCH"])
@requires_roles(*ADMIN_ONLY)
def update_rate(rid):
    return ok(svc.update_rate(rid, json_body(), current_user_id()))


@bp.delete("/<int:rid>")
@requires_roles(*ADMIN_ONLY)
def delete_rate(rid):
    return ok(svc.delete_rate(rid, current_user_id()))
