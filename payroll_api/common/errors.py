# payroll_api/common/errors.py
from flask import Blueprint, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError
from payroll_api.common.http import fail

bp_errors = Blueprint("errors", __name__)


class APIError(Exception):
    """Custom API Error class."""
    status_code = 400
    code = "API_ERROR"

    def __init__(self, message, status_code=None, code=None, payload=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.payload = payload


class ValidationError(APIError):
    """
    Field-level, recoverable input failure.
    `errors` is a list of {"field": ..., "message": ...} dicts for re-display in the form.
    """
    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, errors, message="Validation failed"):
        super().__init__(message)
        self.errors = list(errors or [])

    @classmethod
    def single(cls, field, message):
        return cls([{"field": field, "message": message}], message=message)


class NotFoundError(APIError):
    status_code = 404
    code = "NOT_FOUND"


class PersistenceError(APIError):
    """The store rejected the write (constraint, missing reference, failed batch)."""
    status_code = 409
    code = "PERSISTENCE_ERROR"


class AuthError(APIError):
    status_code = 401
    code = "UNAUTHORIZED"


@bp_errors.app_errorhandler(ValidationError)
def _validation(e: ValidationError):
    current_app.logger.debug("validation failed: %s", e.errors)
    return fail(message=e.message, status=e.status_code, code=e.code, errors=e.errors)

@bp_errors.app_errorhandler(APIError)
def _api_error(e: APIError):
    if isinstance(e, PersistenceError):
        current_app.logger.error("persistence failure: %s", e.payload or e.message)
    return fail(message=e.message, status=e.status_code, code=e.code, detail=e.payload)

@bp_errors.app_errorhandler(HTTPException)
def _http(e: HTTPException):
    return fail(message=e.description or "HTTP error", status=e.code or 400)

@bp_errors.app_errorhandler(IntegrityError)
def _integrity(e: IntegrityError):
    # 409 for unique/FK violations
    return fail(message="Conflict / integrity error", status=409, code="CONSTRAINT_ERROR",
                detail=str(e.orig) if getattr(e, "orig", None) else str(e))

@bp_errors.app_errorhandler(Exception)
def _unhandled(e: Exception):
    current_app.logger.exception(e)
    return fail(message="Internal Server Error", status=500)
