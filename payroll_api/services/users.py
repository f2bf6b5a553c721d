import logging

from payroll_api.common.dates import iso
from payroll_api.common.errors import APIError, AuthError, NotFoundError, PersistenceError, ValidationError
from payroll_api.common.tx import commit
from payroll_api.extensions import db
from payroll_api.models.user import User
from payroll_api.schemas import validate_record
from payroll_api.services.activity import log_activity

log = logging.getLogger(__name__)

SLUG = "users"


def row(u: User):
    return {
        "id": u.id,
        "username": u.username,
        "full_name": u.full_name,
        "email": u.email,
        "role": u.role,
        "active": bool(u.active),
        "created_at": iso(u.created_at),
    }


def _load(user_id) -> User:
    u = db.session.get(User, user_id)
    if u is None:
        raise NotFoundError(f"User {user_id} not found")
    return u


def authenticate(data) -> User:
    res = validate_record("login", data)
    if not res.ok:
        raise ValidationError(res.errors)
    u = User.query.filter_by(username=res.value["username"]).first()
    if not u or not u.check_password(res.value["password"]):
        log.info("failed login for %r", res.value["username"])
        raise AuthError("Invalid credentials")
    if not u.active:
        raise AuthError("Account is disabled", status_code=403, code="FORBIDDEN")
    return u


def list_users():
    return [row(u) for u in User.query.order_by(User.username.asc()).all()]


def get_user(user_id):
    return row(_load(user_id))


def create_user(data, acting_user_id=None):
    res = validate_record(SLUG, data)
    if not res.ok:
        raise ValidationError(res.errors)
    value = dict(res.value)
    if User.query.filter_by(username=value["username"]).first():
        raise PersistenceError(f"Username {value['username']} is taken")
    password = value.pop("password")
    u = User(**value)
    u.set_password(password)
    db.session.add(u)
    if acting_user_id is not None:
        log_activity(acting_user_id, "Create User", f"Created {u.role} user {u.username}")
    commit("user")
    return row(u)


def update_user(user_id, data, acting_user_id):
    u = _load(user_id)
    res = validate_record(SLUG, data, partial=True)
    if not res.ok:
        raise ValidationError(res.errors)
    value = dict(res.value)
    if "username" in value and value["username"] != u.username:
        if User.query.filter_by(username=value["username"]).first():
            raise PersistenceError(f"Username {value['username']} is taken")
    if u.id == acting_user_id and (value.get("active") is False or value.get("role", u.role) != u.role):
        raise APIError("You cannot demote or deactivate your own account", status_code=400, code="SELF_LOCKOUT")

    changed = []
    password = value.pop("password", None)
    if password:
        u.set_password(password)
        changed.append("password")
    for k, v in value.items():
        if getattr(u, k) != v:
            setattr(u, k, v)
            changed.append(k)
    if changed:
        log_activity(acting_user_id, "Update User", f"Updated user {u.username} ({', '.join(sorted(changed))})")
        commit("user")
    return row(u)


def delete_user(user_id, acting_user_id):
    """Users own records and log entries, so removal is a deactivation."""
    u = _load(user_id)
    if u.id == acting_user_id:
        raise APIError("You cannot delete your own account", status_code=400, code="SELF_LOCKOUT")
    if u.active:
        u.active = False
        log_activity(acting_user_id, "Deactivate User", f"Deactivated user {u.username}")
        commit("user")
    return {"id": user_id, "deleted": True, "active": False}
