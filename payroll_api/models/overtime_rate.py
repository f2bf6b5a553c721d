from datetime import datetime
from payroll_api.extensions import db

OVERTIME_RATE_TYPES = ("Weekday", "Saturday", "Sunday", "Public Holiday")

# multipliers used by `flask seed-overtime-rates`
DEFAULT_OVERTIME_RATES = {
    "Weekday": 1.5,
    "Saturday": 1.5,
    "Sunday": 2.0,
    "Public Holiday": 2.0,
}

class OvertimeRate(db.Model):
    __tablename__ = "overtime_rates"

    id = db.Column(db.Integer, primary_key=True)
    overtime_type = db.Column(db.Enum(*OVERTIME_RATE_TYPES, name="overtime_type"), nullable=False, unique=True)
    rate = db.Column(db.Numeric(5, 2), nullable=False)
    description = db.Column(db.Text)
    updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
