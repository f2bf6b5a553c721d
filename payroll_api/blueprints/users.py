from flask import Blueprint

from payroll_api.common.auth import ADMIN_ONLY, current_user_id, requires_roles
from payroll_api.common.http import json_body, ok
from payroll_api.services import users as svc

bp = Blueprint("users", __name__, url_prefix="/api/users")


@bp.get("")
@requires_roles(*ADMIN_ONLY)
def list_users():
    rows = svc.list_users()
    return ok(rows, total=len(rows))


@bp.get("/<int:user_id>")
@requires_roles(*ADMIN_ONLY)
def get_user(user_id):
    return ok(svc.get_user(user_id))


@bp.post("")
@requires_roles(*ADMIN_ONLY)
def create_user():
    return ok(svc.create_user(json_body(), current_user_id()), status=201)


@bp.route("/<int:user_id>", methods=["PUT", "PATCH"])
@requires_roles(*ADMIN_ONLY)
def update_user(user_id):
    return ok(svc.update_user(user_id, json_body(), current_user_id()))


@bp.delete("/<int:user_id>")
@requires_roles(*ADMIN_ONLY)
def delete_user(user_id):
    return ok(svc.delete_user(user_id, current_user_id()))
