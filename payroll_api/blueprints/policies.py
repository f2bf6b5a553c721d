from flask import Blueprint, current_app, request

from payroll_api.common.auth import ALL_ROLES, WRITE_ROLES, current_user_id, requires_roles
from payroll_api.common.errors import ValidationError
from payroll_api.common.http import json_body, ok
from payroll_api.common.listing import check_choice, list_filters
from payroll_api.models.employee import COMPANIES
from payroll_api.models.insurance import INSURERS, POLICY_STATUSES
from payroll_api.services import employees as employee_svc
from payroll_api.services import policies as svc

bp = Blueprint("policies", __name__, url_prefix="/api")


def _policy_filters():
    """`company` may name either the insurer or the employee's business unit."""
    f = list_filters(choices={"company": COMPANIES + INSURERS, "status": POLICY_STATUSES})
    company = f.pop("company", None)
    insurer = request.args.get("insurer") or (company if company in INSURERS else None)
    emp_company = (request.args.get("employee_company") or request.args.get("employeeCompany")
                   or (company if company in COMPANIES else None))
    if insurer and insurer.lower() != "all":
        check_choice("insurer", insurer, INSURERS)
        f["insurer"] = insurer
    if emp_company and emp_company.lower() != "all":
        check_choice("employee_company", emp_company, COMPANIES)
        f["employee_company"] = emp_company
    return f


@bp.get("/policies")
@requires_roles(*ALL_ROLES)
def list_policies():
    rows = svc.list_policies(_policy_filters())
    return ok(rows, total=len(rows))


@bp.get("/policies/report")
@requires_roles(*ALL_ROLES)
def policy_report():
    f = _policy_filters()
    return ok(svc.policy_report(f.get("month"), f.get("employee_company")))


@bp.get("/policies/<int:pid>")
@requires_roles(*ALL_ROLES)
def get_policy(pid):
    return ok(svc.get_policy(pid))


@bp.post("/policies")
@requires_roles(*WRITE_ROLES)
def create_policy():
    return ok(svc.create_policy(json_body(), current_user_id()), status=201)


@bp.route("/policies/<int:pid>", methods=["PUT", "PATCH"])
@requires_roles(*WRITE_ROLES)
def update_policy(pid):
    return ok(svc.update_policy(pid, json_body(), current_user_id()))


@bp.delete("/policies/<int:pid>")
@requires_roles(*WRITE_ROLES)
def delete_policy(pid):
    return ok(svc.delete_policy(pid, current_user_id()))


# ---------- payments ----------

@bp.get("/policies/<int:pid>/payments")
@requires_roles(*ALL_ROLES)
def list_payments(pid):
    return ok(svc.list_payments(pid))


@bp.post("/policies/<int:pid>/payments")
@requires_roles(*WRITE_ROLES)
def add_payment(pid):
    return ok(svc.add_payment(pid, json_body(), current_user_id()), status=201)


@bp.route("/policy-payments/<int:pay_id>", methods=["PUT", "PATCH"])
@requires_roles(*WRITE_ROLES)
def update_payment(pay_id):
    return ok(svc.update_payment(pay_id, json_body(), current_user_id()))


@bp.delete("/policy-payments/<int:pay_id>")
@requires_roles(*WRITE_ROLES)
def delete_payment(pay_id):
    return ok(svc.delete_payment(pay_id, current_user_id()))


# ---------- import ----------

def _flag(name, default=True):
    v = request.form.get(name, request.args.get(name))
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


@bp.post("/policies/import")
@requires_roles(*WRITE_ROLES)
def import_policies():
    """
    Multipart 'file' (.csv/.xlsx), a raw text/csv body, or JSON {"rows": [...]}.
    ?update_existing=false / ?add_new=false switch either half off.
    """
    if "file" in request.files:
        rows = employee_svc.read_rows(request.files["file"])
    elif request.mimetype == "text/csv":
        rows = employee_svc.rows_from_csv(request.get_data(as_text=True))
    else:
        rows = json_body().get("rows")
        if not isinstance(rows, list):
            raise ValidationError.single("rows", "Upload a file in form field 'file' or send {rows: [...]}")

    result = svc.import_policies(
        rows, current_user_id(),
        update_existing=_flag("update_existing"), add_new=_flag("add_new"),
    )
    current_app.logger.info(
        "policy import by user %s: %s created, %s updated, %s rejected",
        current_user_id(), result["created"], result["updated"], result["rejected"],
    )
    return ok(result)


# ---------- export history ----------

@bp.get("/policy-exports")
@requires_roles(*ALL_ROLES)
def list_policy_exports():
    company = request.args.get("company")
    if company and company.lower() != "all":
        check_choice("company", company, INSURERS)
    else:
        company = None
    user_id = request.args.get("user_id", type=int) or request.args.get("userId", type=int)
    rows = svc.list_policy_exports(user_id=user_id, company=company)
    return ok(rows, total=len(rows))


@bp.post("/policy-exports")
@requires_roles(*WRITE_ROLES)
def create_policy_export():
    return ok(svc.create_policy_export(json_body(), current_user_id()), status=201)
