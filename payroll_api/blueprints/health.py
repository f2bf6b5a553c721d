from datetime import datetime

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from payroll_api.common.http import ok, fail
from payroll_api.extensions import db

bp = Blueprint("health", __name__, url_prefix="/api")


@bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        current_app.logger.error("health check: database unreachable: %s", e)
        return fail("database unreachable", status=503, code="DB_DOWN")
    return ok({"status": "ok", "time": datetime.utcnow().isoformat()})
