import os
from datetime import date

import pytest
from flask_jwt_extended import create_access_token

from payroll_api import create_app
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.user import User


def _mk_app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def app():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    out = {}
    for username, role in (
        ("admin", "Admin"),
        ("hr", "HR Manager"),
        ("payroll", "Payroll Officer"),
        ("viewer", "Viewer"),
    ):
        u = User(username=username, full_name=f"{role} User", role=role, active=True)
        u.set_password("secret123")
        db.session.add(u)
        db.session.commit()
        out[role] = u.id
    return out


@pytest.fixture
def employees(app):
    jane = Employee(employee_code="E001", first_name="Jane", last_name="Doe", company="Butters",
                    department="Security", position="Guard", date_joined=date(2023, 1, 9))
    john = Employee(employee_code="E002", first_name="John", last_name="Smith", company="Makana",
                    department="Operations", position="Supervisor")
    db.session.add_all([jane, john])
    db.session.commit()
    return {"jane": jane.id, "john": john.id}


@pytest.fixture
def auth(app, users):
    """auth("HR Manager") -> request headers carrying a token for that seeded user."""
    def headers(role="HR Manager"):
        token = create_access_token(identity=str(users[role]), additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}
    return headers
