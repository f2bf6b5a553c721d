from datetime import datetime
from payroll_api.extensions import db

COMPANIES = ("Butters", "Makana")
DEPARTMENTS = ("Security", "Administration", "Operations")
EMPLOYEE_STATUSES = ("Active", "On Leave", "Terminated")
VIP_CODE_STATUSES = ("Not Requested", "Requested", "Issued", "Rejected")

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    employee_code = db.Column(db.String(32), unique=True, nullable=False)
    first_name = db.Column(db.String(80), nullable=False)
    last_name  = db.Column(db.String(80), nullable=False)
    id_number  = db.Column(db.String(20), nullable=True)

    company    = db.Column(db.Enum(*COMPANIES, name="company"), nullable=False, default="Butters")
    department = db.Column(db.Enum(*DEPARTMENTS, name="department"), nullable=False, default="Security")
    position   = db.Column(db.String(120), nullable=False)
    status     = db.Column(db.Enum(*EMPLOYEE_STATUSES, name="employee_status"), nullable=False, default="Active")

    email   = db.Column(db.String(255), nullable=True)
    phone   = db.Column(db.String(20), nullable=True)
    address = db.Column(db.Text, nullable=True)
    date_joined = db.Column(db.Date, nullable=True)

    # financial
    base_salary = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax_number  = db.Column(db.String(32), nullable=True)
    bank_name   = db.Column(db.String(80), nullable=True)
    bank_account = db.Column(db.String(40), nullable=True)
    bank_branch = db.Column(db.String(80), nullable=True)

    # code on the external VIP payroll system, requested and issued by HR
    vip_code = db.Column(db.String(32), nullable=True)
    vip_code_requested = db.Column(db.Boolean, nullable=False, default=False)
    vip_code_request_date = db.Column(db.DateTime, nullable=True)
    vip_code_status = db.Column(db.String(20), nullable=False, default="Not Requested")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_emp_company", "company"),
        db.Index("ix_emp_status", "status"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
