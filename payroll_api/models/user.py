from datetime import datetime
from payroll_api.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

USER_ROLES = ("Admin", "HR Manager", "Payroll Officer", "Viewer")

class User(db.Model):
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    username      = db.Column(db.String(80), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name     = db.Column(db.String(255), nullable=False)
    email         = db.Column(db.String(255), nullable=True)
    role          = db.Column(db.Enum(*USER_ROLES, name="user_role"), nullable=False, default="Viewer")
    active        = db.Column(db.Boolean, nullable=False, default=True)
    created_at    = db.Column(db.DateTime, default=datetime.utcnow)

    # --- helpers ---
    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash, raw)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"
