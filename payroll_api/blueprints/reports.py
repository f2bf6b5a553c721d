from flask import Blueprint, request

from payroll_api.common.auth import ALL_ROLES, WRITE_ROLES, current_user_id, requires_roles
from payroll_api.common.http import json_body, ok
from payroll_api.services import activity as activity_svc
from payroll_api.services import exports as export_svc
from payroll_api.services.payroll_records import dashboard_summary

bp = Blueprint("reports", __name__, url_prefix="/api")


@bp.get("/dashboard")
@requires_roles(*ALL_ROLES)
def dashboard():
    return ok(dashboard_summary())


@bp.get("/activity-logs")
@requires_roles(*ALL_ROLES)
def activity_logs():
    limit = request.args.get("limit", type=int)
    return ok(activity_svc.recent_activity(limit))


@bp.get("/export-records")
@requires_roles(*ALL_ROLES)
def list_exports():
    limit = request.args.get("limit", default=50, type=int)
    return ok(export_svc.list_exports(max(1, min(limit, 500))))


@bp.post("/export-records")
@requires_roles(*WRITE_ROLES)
def create_export():
    return ok(export_svc.create_export(json_body(), current_user_id()), status=201)


@bp.route("/reports/data", methods=["GET", "POST"])
@requires_roles(*ALL_ROLES)
def report_data():
    """
    GET  ?month=2025-05-01&recordTypes=Overtime,Loan&company=Butters
    POST {month, record_types: [...], company, include_unapproved}
    """
    if request.method == "POST":
        params = json_body()
    else:
        params = {k: v for k, v in request.args.items()}
        types = params.pop("recordTypes", None) or params.pop("record_types", None)
        params["record_types"] = [t.strip() for t in types.split(",") if t.strip()] if types else []
        if (params.get("company") or "").lower() == "all":
            params.pop("company")
    return ok(export_svc.report_data(params))
