# payroll_api/blueprints/payroll_records.py
"""
One blueprint per PayrollRecord kind, all built from the same factory:

  GET    /api/<slug>              list (company, startDate, endDate, recordType, employeeId, status)
  GET    /api/<slug>/summary      totals over the same filtered list
  POST   /api/<slug>              create
  GET    /api/<slug>/<id>
  PUT    /api/<slug>/<id>         partial update (PATCH too)
  DELETE /api/<slug>/<id>

plus the archive endpoints on `bp_archive`.
"""
from flask import Blueprint, current_app

from payroll_api.common.auth import ADMIN_ONLY, ALL_ROLES, WRITE_ROLES, current_user_id, requires_roles
from payroll_api.common.http import json_body, ok
from payroll_api.common.listing import list_filters
from payroll_api.models.payroll_record import RECORD_STATUSES
from payroll_api.schemas import KINDS
from payroll_api.schemas.records import ARCHIVABLE_TYPES
from payroll_api.services import payroll_records as svc


def make_blueprint(kind) -> Blueprint:
    slug = kind.slug
    bp = Blueprint(f"records_{slug.replace('-', '_')}", __name__, url_prefix=f"/api/{slug}")
    choices = {"status": RECORD_STATUSES, "record_type": kind.record_types}

    @bp.get("")
    @requires_roles(*ALL_ROLES)
    def list_():
        rows = svc.list_records(slug, list_filters(choices=choices))
        return ok(rows, total=len(rows))

    @bp.get("/summary")
    @requires_roles(*ALL_ROLES)
    def summary():
        rows = svc.list_records(slug, list_filters(choices=choices))
        return ok(svc.summarize(rows, kind.total_field))

    @bp.post("")
    @requires_roles(*WRITE_ROLES)
    def create():
        rec = svc.create_record(slug, json_body(), current_user_id())
        current_app.logger.info("%s %s created by user %s", kind.label, rec["id"], current_user_id())
        return ok(rec, status=201)

    @bp.get("/<int:record_id>")
    @requires_roles(*ALL_ROLES)
    def get(record_id):
        return ok(svc.get_record(slug, record_id))

    @bp.route("/<int:record_id>", methods=["PUT", "PATCH"])
    @requires_roles(*WRITE_ROLES)
    def update(record_id):
        return ok(svc.update_record(slug, record_id, json_body(), current_user_id()))

    @bp.delete("/<int:record_id>")
    @requires_roles(*WRITE_ROLES)
    def delete(record_id):
        return ok(svc.delete_record(slug, record_id, current_user_id()))

    return bp


record_blueprints = [make_blueprint(k) for k in KINDS.values()]


bp_archive = Blueprint("archive", __name__, url_prefix="/api")


@bp_archive.post("/archive-records")
@requires_roles(*ADMIN_ONLY)
def archive():
    body = json_body()
    types = body.get("record_types", body.get("recordTypes"))
    result = svc.archive_records(types, current_user_id())
    current_app.logger.info("archive by user %s: %s", current_user_id(), result["by_type"])
    return ok(result)


@bp_archive.get("/archived-records")
@requires_roles(*ALL_ROLES)
def archived():
    rows = svc.list_archived_records(
        list_filters(choices={"status": RECORD_STATUSES, "record_type": ARCHIVABLE_TYPES})
    )
    return ok(rows, total=len(rows))
