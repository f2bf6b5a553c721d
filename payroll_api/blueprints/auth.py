from flask import Blueprint, current_app
from flask_jwt_extended import create_access_token, jwt_required

from payroll_api.common.auth import current_user_id
from payroll_api.common.errors import AuthError
from payroll_api.common.http import json_body, ok
from payroll_api.extensions import db
from payroll_api.models.user import User
from payroll_api.services import users as user_svc

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/login")
def login():
    u = user_svc.authenticate(json_body())
    claims = {"role": u.role, "username": u.username, "name": u.full_name}
    access = create_access_token(identity=str(u.id), additional_claims=claims)
    current_app.logger.info("login user=%s role=%s", u.username, u.role)
    return ok({"access": access, "user": user_svc.row(u)})


@bp.get("/me")
@jwt_required()
def me():
    u = db.session.get(User, current_user_id()) if current_user_id() else None
    if not u or not u.active:
        raise AuthError("User not found")
    return ok(user_svc.row(u))
