import logging

from flask import current_app

from payroll_api.extensions import db
from payroll_api.models.audit import ActivityLog
from payroll_api.models.user import User

log = logging.getLogger(__name__)


def log_activity(user_id, action, details=None):
    """
    Stage one ActivityLog row on the current session.
    The caller commits, so the entry lands in the same transaction as the write it describes.
    """
    entry = ActivityLog(user_id=user_id, action=action, details=details)
    db.session.add(entry)
    log.info("activity user=%s action=%s", user_id, action)
    return entry


def _row(a: ActivityLog, name=None):
    return {
        "id": a.id,
        "user_id": a.user_id,
        "user_name": name,
        "action": a.action,
        "details": a.details,
        "timestamp": a.timestamp.isoformat() if a.timestamp else None,
    }


def recent_activity(limit=None):
    """Newest first, joined with the acting user's display name."""
    if limit is None:
        limit = current_app.config.get("ACTIVITY_LOG_DEFAULT_LIMIT", 10)
    limit = max(1, min(int(limit), 500))
    rows = (
        db.session.query(ActivityLog, User.full_name)
        .outerjoin(User, User.id == ActivityLog.user_id)
        .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
    return [_row(a, name) for a, name in rows]
