from flask import Blueprint

from payroll_api.common.auth import ALL_ROLES, WRITE_ROLES, current_user_id, requires_roles
from payroll_api.common.http import json_body, ok
from payroll_api.common.listing import list_filters
from payroll_api.services import maternity as svc

bp = Blueprint("maternity", __name__, url_prefix="/api/maternity-records")


@bp.get("")
@requires_roles(*ALL_ROLES)
def list_maternity():
    rows = svc.list_maternity(list_filters())
    return ok(rows, total=len(rows))


@bp.get("/<int:mid>")
@requires_roles(*ALL_ROLES)
def get_maternity(mid):
    return ok(svc.get_maternity(mid))


@bp.post("")
@requires_roles(*WRITE_ROLES)
def create_maternity():
    return ok(svc.create_maternity(json_body(), current_user_id()), status=201)


@bp.route("/<int:mid>", methods=["PUT", "PATCH"])
@requires_roles(*WRITE_ROLES)
def update_maternity(mid):
    return ok(svc.update_maternity(mid, json_body(), current_user_id()))


@bp.delete("/<int:mid>")
@requires_roles(*WRITE_ROLES)
def delete_maternity(mid):
    return ok(svc.delete_maternity(mid, current_user_id()))
