from datetime import datetime
from payroll_api.extensions import db

RECORD_TYPES = (
    "Leave",
    "Termination",
    "Advance",
    "Loan",
    "Deduction",
    "Overtime",
    "Standby Shift",
    "Bank Account Change",
    "Special Shift",
    "Escort Allowance",
    "Commission",
    "Cash in Transit",
    "Camera Allowance",
    "Staff Garnishee",
    "Maternity Leave",
)
RECORD_STATUSES = ("Pending", "Approved", "Rejected")


class PayrollRecord(db.Model):
    """
    One table for every payroll transaction, discriminated by record_type.
    Which of the nullable columns matter depends on the type:
      hours/rate                      -> Overtime
      start_date/end_date/total_days  -> Leave, Maternity Leave
      amount                          -> monetary types
    """
    __tablename__ = "payroll_records"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)
    record_type = db.Column(db.Enum(*RECORD_TYPES, name="record_type"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=True)
    hours  = db.Column(db.Numeric(6, 2), nullable=True)
    rate   = db.Column(db.Numeric(5, 2), nullable=True)     # multiplier, e.g. 1.5

    start_date = db.Column(db.Date, nullable=True)
    end_date   = db.Column(db.Date, nullable=True)
    total_days = db.Column(db.Numeric(6, 2), nullable=True)

    status = db.Column(db.Enum(*RECORD_STATUSES, name="record_status"), nullable=False, default="Pending")
    approved  = db.Column(db.Boolean, nullable=False, default=False)   # mirrors status == Approved
    recurring = db.Column(db.Boolean, nullable=False, default=False)

    details     = db.Column(db.Text, nullable=True)
    description = db.Column(db.Text, nullable=True)
    notes       = db.Column(db.Text, nullable=True)
    document_image = db.Column(db.String(500), nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")
    creator  = db.relationship("User", foreign_keys=[created_by])


class ArchivedPayrollRecord(db.Model):
    __tablename__ = "archived_payroll_records"

    id = db.Column(db.Integer, primary_key=True)
    original_id = db.Column(db.Integer, nullable=False)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True, index=True)
    record_type = db.Column(db.String(40), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)

    amount = db.Column(db.Numeric(12, 2))
    hours  = db.Column(db.Numeric(6, 2))
    rate   = db.Column(db.Numeric(5, 2))
    start_date = db.Column(db.Date)
    end_date   = db.Column(db.Date)
    total_days = db.Column(db.Numeric(6, 2))
    status = db.Column(db.String(20))
    approved  = db.Column(db.Boolean, default=False)
    recurring = db.Column(db.Boolean, default=False)
    details     = db.Column(db.Text)
    description = db.Column(db.Text)
    notes       = db.Column(db.Text)
    document_image = db.Column(db.String(500))
    created_by = db.Column(db.Integer)
    created_at = db.Column(db.DateTime)

    archived_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    archived_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    employee = db.relationship("Employee", lazy="joined")

    # columns copied verbatim from payroll_records when archiving
    COPIED = (
        "employee_id", "record_type", "date", "amount", "hours", "rate",
        "start_date", "end_date", "total_days", "status", "approved", "recurring",
        "details", "description", "notes", "document_image", "created_by", "created_at",
    )
