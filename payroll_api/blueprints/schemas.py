from flask import Blueprint

from payroll_api.common.auth import ALL_ROLES, requires_roles
from payroll_api.common.errors import NotFoundError
from payroll_api.common.http import ok
from payroll_api.schemas import json_schema, known_kinds, schema_for

bp = Blueprint("schemas", __name__, url_prefix="/api/schemas")


@bp.get("")
@requires_roles(*ALL_ROLES)
def list_schemas():
    return ok(known_kinds())


@bp.get("/<kind>")
@requires_roles(*ALL_ROLES)
def get_schema(kind):
    """JSON Schema of the input rules, so a form can validate with the same definition."""
    try:
        schema = schema_for(kind)
    except KeyError:
        raise NotFoundError(f"Unknown record kind {kind!r}") from None
    return ok(json_schema(schema))
