# payroll_api/schemas/__init__.py
"""
Single definition of the input rules for every record kind.

The REST layer and the services both go through `validate_record`; clients can
fetch the same rules as JSON Schema from /api/schemas/<kind>.
"""
from payroll_api.schemas.base import ValidationResult, json_schema, run_schema
from payroll_api.schemas.payroll_records import KINDS, RecordKind, get_kind
from payroll_api.schemas import records as _records

# non-PayrollRecord schemas, addressable by the same name scheme as the kinds
OTHER_SCHEMAS = {
    "recurring-deductions": _records.RecurringDeductionIn,
    "policies": _records.InsurancePolicyIn,
    "policy-payments": _records.PolicyPaymentIn,
    "policy-exports": _records.PolicyExportIn,
    "policy-import-rows": _records.PolicyImportRowIn,
    "maternity-records": _records.MaternityRecordIn,
    "employees": _records.EmployeeIn,
    "vip-codes": _records.VipCodeIn,
    "users": _records.UserIn,
    "login": _records.LoginIn,
    "overtime-rates": _records.OvertimeRateIn,
    "export-records": _records.ExportRecordIn,
    "archive-records": _records.ArchiveRequestIn,
    "reports": _records.ReportRequestIn,
}


def schema_for(kind: str):
    if kind in KINDS:
        return KINDS[kind].schema
    return OTHER_SCHEMAS[kind]


def validate_record(kind: str, raw, partial: bool = False) -> ValidationResult:
    """Raises KeyError only for an unknown kind; bad input comes back in `.errors`."""
    return run_schema(schema_for(kind), raw, partial=partial)


def known_kinds():
    return sorted(list(KINDS) + list(OTHER_SCHEMAS))


__all__ = [
    "KINDS", "OTHER_SCHEMAS", "RecordKind", "ValidationResult",
    "get_kind", "json_schema", "known_kinds",
    "schema_for", "validate_record",
]
