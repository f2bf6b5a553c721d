# payroll_api/schemas/payroll_records.py
"""
Per-kind rules for PayrollRecord input.

Each kind is one endpoint slug (/api/leave, /api/overtime, ...) mapped onto one
or more `record_type` values of the shared payroll_records table.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional, Tuple

from pydantic import Field

from payroll_api.models.payroll_record import RECORD_STATUSES
from payroll_api.schemas.base import BaseSchema, DateValue, today

LEAVE_TYPES = (
    "Annual Leave", "Sick Leave", "Personal Leave",
    "Unpaid Leave", "Compassionate Leave", "Study Leave",
)
BANK_NAMES = (
    "ABSA", "Capitec", "FNB", "Nedbank", "Standard Bank",
    "African Bank", "TymeBank", "Discovery Bank", "Other",
)
DEDUCTION_TYPES = (
    "Tax", "Loan Repayment", "Advance Repayment",
    "Insurance", "Pension", "Union Dues", "Other",
)
OVERTIME_TYPES = ("Weekday", "Weekend", "Public Holiday", "Night Shift")
ALLOWANCE_TYPES = (
    "Escort Allowance", "Cash in Transit", "Commission",
    "Special Shift", "Standby Shift", "Camera Allowance",
)

DEFAULT_OVERTIME_RATE = Decimal("1.5")

RecordStatus = Literal[RECORD_STATUSES]


class PayrollRecordIn(BaseSchema):
    employee_id: int = Field(gt=0)
    date: DateValue = Field(default_factory=today)
    status: RecordStatus = "Pending"
    approved: bool = False
    recurring: bool = False
    details: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    document_image: Optional[str] = None

    @classmethod
    def normalize(cls, value, supplied):
        # status is authoritative; a bare legacy `approved` flag is lifted onto it
        if "status" not in supplied and "approved" in supplied:
            value["status"] = "Approved" if value["approved"] else "Pending"
        if "status" in value:
            value["approved"] = value["status"] == "Approved"
        return value


class _Span(PayrollRecordIn):
    span = ("start_date", "end_date")

    start_date: DateValue
    end_date: DateValue
    total_days: Optional[Decimal] = Field(None, ge=0)


class _Monetary(PayrollRecordIn):
    amount: Decimal = Field(ge=0)


class LeaveIn(_Span):
    record_type: Literal["Leave"] = "Leave"
    details: Literal[LEAVE_TYPES]


class MaternityLeaveIn(_Span):
    record_type: Literal["Maternity Leave"] = "Maternity Leave"


class OvertimeIn(PayrollRecordIn):
    record_type: Literal["Overtime"] = "Overtime"
    hours: Decimal = Field(ge=0)
    rate: Decimal = Field(DEFAULT_OVERTIME_RATE, ge=0)
    amount: Optional[Decimal] = Field(None, ge=0)
    details: Optional[Literal[OVERTIME_TYPES]] = None


class DeductionIn(_Monetary):
    record_type: Literal["Deduction"] = "Deduction"
    details: Literal[DEDUCTION_TYPES]


class AllowanceIn(_Monetary):
    record_type: Literal[ALLOWANCE_TYPES] = "Escort Allowance"


class AdvanceIn(_Monetary):
    record_type: Literal["Advance"] = "Advance"


class LoanIn(_Monetary):
    record_type: Literal["Loan"] = "Loan"


class GarnisheeIn(_Monetary):
    record_type: Literal["Staff Garnishee"] = "Staff Garnishee"


class BankAccountChangeIn(PayrollRecordIn):
    record_type: Literal["Bank Account Change"] = "Bank Account Change"
    details: Literal[BANK_NAMES]
    description: str = Field(min_length=1)


class TerminationIn(PayrollRecordIn):
    record_type: Literal["Termination"] = "Termination"
    details: str = Field(min_length=1)


@dataclass(frozen=True)
class RecordKind:
    slug: str
    label: str                        # "Leave" -> "Create Leave Record"
    record_types: Tuple[str, ...]
    schema: type
    total_field: str = "amount"       # what /summary adds up

    @property
    def default_type(self) -> str:
        return self.record_types[0]

    @property
    def is_span(self) -> bool:
        return self.schema.span is not None

    def describe(self, record_type: str, details: Optional[str]) -> str:
        """Human label used in activity messages, e.g. 'Annual Leave' or 'Commission'."""
        if self.slug == "leave" and details:
            return details
        return record_type


KINDS = {
    k.slug: k
    for k in (
        RecordKind("leave", "Leave", ("Leave",), LeaveIn, total_field="total_days"),
        RecordKind("maternity-leave", "Maternity Leave", ("Maternity Leave",), MaternityLeaveIn, total_field="total_days"),
        RecordKind("overtime", "Overtime", ("Overtime",), OvertimeIn, total_field="hours"),
        RecordKind("deductions", "Deduction", ("Deduction",), DeductionIn),
        RecordKind("allowances", "Allowance", ALLOWANCE_TYPES, AllowanceIn),
        RecordKind("advances", "Advance", ("Advance",), AdvanceIn),
        RecordKind("loans", "Loan", ("Loan",), LoanIn),
        RecordKind("garnishees", "Staff Garnishee", ("Staff Garnishee",), GarnisheeIn),
        RecordKind("bank-account-changes", "Bank Account Change", ("Bank Account Change",), BankAccountChangeIn),
        RecordKind("terminations", "Termination", ("Termination",), TerminationIn),
    )
}


def get_kind(slug: str) -> RecordKind:
    """Unknown kinds are programming errors, not user input."""
    return KINDS[slug]
