from flask import Blueprint, current_app, request

from payroll_api.common.auth import ALL_ROLES, WRITE_ROLES, current_user_id, requires_roles
from payroll_api.common.errors import ValidationError
from payroll_api.common.http import json_body, ok
from payroll_api.common.listing import list_filters
from payroll_api.models.employee import EMPLOYEE_STATUSES
from payroll_api.services import employees as svc

bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@bp.get("")
@requires_roles(*ALL_ROLES)
def list_employees():
    rows = svc.list_employees(list_filters(choices={"status": EMPLOYEE_STATUSES}))
    return ok(rows, total=len(rows))


@bp.get("/<int:eid>")
@requires_roles(*ALL_ROLES)
def get_employee(eid):
    return ok(svc.get_employee(eid))


@bp.post("")
@requires_roles(*WRITE_ROLES)
def create_employee():
    return ok(svc.create_employee(json_body(), current_user_id()), status=201)


@bp.route("/<int:eid>", methods=["PUT", "PATCH"])
@requires_roles(*WRITE_ROLES)
def update_employee(eid):
    return ok(svc.update_employee(eid, json_body(), current_user_id()))


@bp.delete("/<int:eid>")
@requires_roles(*WRITE_ROLES)
def terminate_employee(eid):
    """Employees are never removed; this marks them Terminated."""
    return ok(svc.terminate_employee(eid, current_user_id()))


@bp.post("/<int:eid>/vip-code/request")
@requires_roles(*WRITE_ROLES)
def request_vip_code(eid):
    return ok(svc.request_vip_code(eid, current_user_id()))


@bp.put("/<int:eid>/vip-code")
@requires_roles(*WRITE_ROLES)
def set_vip_code(eid):
    """{vip_code, vip_code_status}: Issued (code required), Rejected, Not Requested."""
    return ok(svc.set_vip_code(eid, json_body(), current_user_id()))


@bp.post("/import")
@requires_roles(*WRITE_ROLES)
def import_employees():
    """
    Either multipart form-data with 'file' (.csv/.xlsx, one header row)
    or JSON {"rows": [{employee_code, first_name, ...}, ...]}.
    Existing employee codes are updated, new ones created.
    """
    if "file" in request.files:
        rows = svc.read_rows(request.files["file"])
    else:
        rows = json_body().get("rows")
        if not isinstance(rows, list):
            raise ValidationError.single("rows", "Upload a file in form field 'file' or send {rows: [...]}")

    result = svc.import_employees(rows, current_user_id())
    current_app.logger.info(
        "employee import by user %s: %s created, %s updated, %s rejected",
        current_user_id(), result["created"], result["updated"], result["rejected"],
    )
    return ok(result)
