# payroll_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Optional

from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from payroll_api.common.http import fail
from payroll_api.extensions import db
from payroll_api.models.user import User, USER_ROLES

ADMIN = "Admin"
ALL_ROLES = USER_ROLES
WRITE_ROLES = ("Admin", "HR Manager", "Payroll Officer")
ADMIN_ONLY = (ADMIN,)


def current_user_id() -> Optional[int]:
    uid = get_jwt_identity()
    try:
        return int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None


def _role_from_db(uid: int) -> Optional[str]:
    user = db.session.get(User, uid)
    if not user or not user.active:
        return None
    return user.role


def requires_roles(*roles: str):
    """
    Require that the current user holds ONE of the given roles.
    - Uses the `role` claim issued at login; falls back to the users table.
    - 'Admin' always passes.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            uid = current_user_id()
            if uid is None:
                return fail("Unauthorized", status=401, code="UNAUTHORIZED")

            role = (get_jwt() or {}).get("role") or _role_from_db(uid)
            if role is None:
                return fail("Unauthorized", status=401, code="UNAUTHORIZED")

            if role == ADMIN or not roles or role in roles:
                return fn(*args, **kwargs)
            return fail("Forbidden", status=403, code="FORBIDDEN")
        return inner
    return outer
