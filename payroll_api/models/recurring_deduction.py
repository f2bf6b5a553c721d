from datetime import datetime
from payroll_api.extensions import db

FREQUENCIES = ("weekly", "biweekly", "monthly", "quarterly")

class RecurringDeduction(db.Model):
    __tablename__ = "recurring_deductions"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)
    deduction_name = db.Column(db.String(80), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)      # null => indefinite
    frequency = db.Column(db.Enum(*FREQUENCIES, name="deduction_frequency"), nullable=False, default="monthly")
    description = db.Column(db.Text)
    approved = db.Column(db.Boolean, nullable=False, default=False)
    reference_number = db.Column(db.String(16), nullable=True, unique=True)   # RD000123, set after insert
    document_image = db.Column(db.String(500))
    notes = db.Column(db.Text)
    active = db.Column(db.Boolean, nullable=False, default=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")
