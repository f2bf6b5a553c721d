# payroll_api/common/tx.py
from sqlalchemy.exc import SQLAlchemyError

from payroll_api.common.errors import PersistenceError
from payroll_api.extensions import db


def commit(what="write"):
    """Commit the session; on failure roll back and surface a PersistenceError."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        detail = str(getattr(e, "orig", None) or e)
        raise PersistenceError(f"Could not save {what}", payload=detail) from e


def flush(what="write"):
    try:
        db.session.flush()
    except SQLAlchemyError as e:
        db.session.rollback()
        detail = str(getattr(e, "orig", None) or e)
        raise PersistenceError(f"Could not save {what}", payload=detail) from e
