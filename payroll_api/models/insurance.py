from datetime import datetime
from payroll_api.extensions import db

INSURERS = ("Sanlam Sky", "Avbob", "Old Mutual", "Provident Fund")
POLICY_STATUSES = ("Active", "Cancelled", "Pending", "Suspended")

class InsurancePolicy(db.Model):
    __tablename__ = "insurance_policies"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)
    company = db.Column(db.Enum(*INSURERS, name="insurance_company"), nullable=False)
    policy_number = db.Column(db.String(64), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.Enum(*POLICY_STATUSES, name="policy_status"), nullable=False, default="Active")
    notes = db.Column(db.Text)
    document_image = db.Column(db.String(500))

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_at = db.Column(db.DateTime, nullable=True)

    employee = db.relationship("Employee", lazy="joined")
    payments = db.relationship(
        "PolicyPayment",
        back_populates="policy",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PolicyPayment.month",
    )


class PolicyPayment(db.Model):
    __tablename__ = "policy_payments"

    id = db.Column(db.Integer, primary_key=True)
    policy_id = db.Column(db.Integer, db.ForeignKey("insurance_policies.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(40), nullable=False, default="Payroll Deduction")
    month = db.Column(db.Date, nullable=False)     # always the 1st of the month covered
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    policy = db.relationship("InsurancePolicy", back_populates="payments")

    __table_args__ = (
        db.Index("ix_policy_payment_month", "policy_id", "month"),
    )


class PolicyExport(db.Model):
    """History of insurer schedules handed over; the file itself lives client side."""
    __tablename__ = "policy_exports"

    id = db.Column(db.Integer, primary_key=True)
    export_name = db.Column(db.String(255), nullable=False)
    company = db.Column(db.Enum(*INSURERS, name="insurance_company"), nullable=True)   # null = all insurers
    month = db.Column(db.Date, nullable=False)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    format = db.Column(db.String(10), nullable=False, default="csv")
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
