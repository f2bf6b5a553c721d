# payroll_api/schemas/records.py
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from payroll_api.models.employee import COMPANIES, DEPARTMENTS, EMPLOYEE_STATUSES, VIP_CODE_STATUSES
from payroll_api.models.insurance import INSURERS, POLICY_STATUSES
from payroll_api.models.overtime_rate import OVERTIME_RATE_TYPES
from payroll_api.models.payroll_record import RECORD_TYPES
from payroll_api.models.recurring_deduction import FREQUENCIES
from payroll_api.models.user import USER_ROLES
from payroll_api.schemas.base import BaseSchema, DateValue, today
from payroll_api.schemas.payroll_records import DEDUCTION_TYPES

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# record types that can be moved to the archive table
ARCHIVABLE_TYPES = (
    "Advance", "Loan", "Deduction", "Overtime", "Standby Shift", "Special Shift",
    "Escort Allowance", "Commission", "Cash in Transit", "Camera Allowance",
)


class RecurringDeductionIn(BaseSchema):
    span = ("start_date", "end_date")

    employee_id: int = Field(gt=0)
    deduction_name: Literal[DEDUCTION_TYPES]
    amount: Decimal = Field(ge=0)
    start_date: DateValue = Field(default_factory=today)
    end_date: Optional[DateValue] = None
    frequency: Literal[FREQUENCIES] = "monthly"
    description: Optional[str] = None
    approved: bool = False
    document_image: Optional[str] = None
    notes: Optional[str] = None
    active: bool = True


class InsurancePolicyIn(BaseSchema):
    span = ("start_date", "end_date")

    employee_id: int = Field(gt=0)
    company: Literal[INSURERS]
    policy_number: str = Field(min_length=1, max_length=64)
    amount: Decimal = Field(ge=0)
    start_date: DateValue
    end_date: Optional[DateValue] = None
    status: Literal[POLICY_STATUSES] = "Active"
    notes: Optional[str] = None
    document_image: Optional[str] = None


class PolicyPaymentIn(BaseSchema):
    payment_date: DateValue = Field(default_factory=today)
    amount: Decimal = Field(ge=0)
    payment_method: str = Field("Payroll Deduction", min_length=1, max_length=40)
    month: DateValue
    notes: Optional[str] = None

    @classmethod
    def normalize(cls, value, supplied):
        if value.get("month") is not None:
            value["month"] = value["month"].replace(day=1)
        return value


class PolicyExportIn(BaseSchema):
    export_name: str = Field(min_length=1, max_length=255)
    company: Optional[Literal[INSURERS]] = None
    month: DateValue
    total_amount: Decimal = Field(ge=0)
    format: Literal["csv", "xlsx", "pdf"] = "csv"

    @classmethod
    def normalize(cls, value, supplied):
        if value.get("month") is not None:
            value["month"] = value["month"].replace(day=1)
        return value


class PolicyImportRowIn(BaseSchema):
    """One spreadsheet row after header mapping; the employee is resolved separately."""
    company: Literal[INSURERS]
    policy_number: str = Field(min_length=1, max_length=64)
    amount: Decimal = Field(ge=0)
    status: Literal[POLICY_STATUSES] = "Active"
    start_date: DateValue = Field(default_factory=today)
    notes: Optional[str] = None


class MaternityRecordIn(BaseSchema):
    span = ("from_date", "to_date")

    employee_id: int = Field(gt=0)
    from_date: DateValue
    to_date: DateValue
    comments: Optional[str] = None


class EmployeeIn(BaseSchema):
    employee_code: str = Field(min_length=1, max_length=32)
    first_name: str = Field(min_length=1, max_length=80)
    last_name: str = Field(min_length=1, max_length=80)
    id_number: Optional[str] = Field(None, max_length=20)
    company: Literal[COMPANIES] = "Butters"
    department: Literal[DEPARTMENTS] = "Security"
    position: str = Field(min_length=1, max_length=120)
    status: Literal[EMPLOYEE_STATUSES] = "Active"
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    date_joined: Optional[DateValue] = None
    base_salary: Decimal = Field(Decimal("0"), ge=0)
    tax_number: Optional[str] = Field(None, max_length=32)
    bank_name: Optional[str] = Field(None, max_length=80)
    bank_account: Optional[str] = Field(None, max_length=40)
    bank_branch: Optional[str] = Field(None, max_length=80)


class VipCodeIn(BaseSchema):
    vip_code: Optional[str] = Field(None, min_length=1, max_length=32)
    vip_code_status: Literal[VIP_CODE_STATUSES] = "Issued"


class UserIn(BaseSchema):
    username: str = Field(min_length=3, max_length=80)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1, max_length=255)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    role: Literal[USER_ROLES] = "Viewer"
    active: bool = True


class LoginIn(BaseSchema):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class OvertimeRateIn(BaseSchema):
    overtime_type: Literal[OVERTIME_RATE_TYPES]
    rate: Decimal = Field(gt=0)
    description: Optional[str] = None


class ExportRecordIn(BaseSchema):
    span = ("start_date", "end_date")

    export_type: str = Field(min_length=1, max_length=60)
    file_url: str = Field(min_length=1, max_length=500)
    file_format: Literal["csv", "xlsx", "pdf"] = "csv"
    start_date: DateValue
    end_date: DateValue
    include_unapproved: bool = False
    record_count: int = Field(0, ge=0)


class ArchiveRequestIn(BaseSchema):
    record_types: List[Literal[ARCHIVABLE_TYPES]] = Field(min_length=1)


class ReportRequestIn(BaseSchema):
    month: DateValue
    record_types: List[Literal[RECORD_TYPES]] = Field(default_factory=list)
    company: Optional[Literal[COMPANIES]] = None
    include_unapproved: bool = True
