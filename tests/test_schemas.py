from datetime import date
from decimal import Decimal

import pytest

from payroll_api.schemas import KINDS, validate_record


def _fields(res):
    return {e["field"] for e in res.errors}


def test_leave_defaults_applied():
    res = validate_record("leave", {
        "employee_id": 1, "details": "Annual Leave",
        "start_date": "2025-05-01", "end_date": "2025-05-05",
    })
    assert res.ok, res.errors
    v = res.value
    assert v["record_type"] == "Leave"
    assert v["status"] == "Pending"
    assert v["approved"] is False
    assert v["recurring"] is False
    assert v["date"] == date.today()
    assert v["start_date"] == date(2025, 5, 1)


def test_camel_case_keys_and_iso_datetimes():
    res = validate_record("leave", {
        "employeeId": "3", "details": "Sick Leave",
        "startDate": "2025-05-01T00:00:00.000Z", "endDate": "2025-05-02T22:00:00.000Z",
    })
    assert res.ok, res.errors
    assert res.value["employee_id"] == 3
    assert res.value["end_date"] == date(2025, 5, 2)
    assert "startDate" not in res.value


def test_span_must_be_ordered():
    res = validate_record("leave", {
        "employee_id": 1, "details": "Annual Leave",
        "start_date": "2025-05-05", "end_date": "2025-05-01",
    })
    assert not res.ok
    assert _fields(res) == {"end_date"}


def test_required_fields_reported_by_name():
    res = validate_record("advances", {"amount": ""})
    assert not res.ok
    assert {"employee_id", "amount"} <= _fields(res)
    assert any(e["message"] == "employee_id is required" for e in res.errors)


def test_negative_numbers_rejected():
    assert _fields(validate_record("loans", {"employee_id": 1, "amount": -5})) == {"amount"}
    assert _fields(validate_record("overtime", {"employee_id": 1, "hours": -1})) == {"hours"}
    res = validate_record("leave", {
        "employee_id": 1, "details": "Annual Leave", "total_days": -2,
        "start_date": "2025-05-01", "end_date": "2025-05-02",
    })
    assert _fields(res) == {"total_days"}


def test_enumerations():
    assert "details" in _fields(validate_record("leave", {
        "employee_id": 1, "details": "Holiday", "start_date": "2025-01-01", "end_date": "2025-01-01"}))
    assert "details" in _fields(validate_record("deductions", {
        "employee_id": 1, "amount": 10, "details": "Parking"}))
    assert "details" in _fields(validate_record("bank-account-changes", {
        "employee_id": 1, "details": "Monzo", "description": "123"}))
    assert "status" in _fields(validate_record("loans", {
        "employee_id": 1, "amount": 10, "status": "Done"}))


def test_bank_change_needs_account_details():
    res = validate_record("bank-account-changes", {"employee_id": 1, "details": "FNB"})
    assert _fields(res) == {"description"}
    res = validate_record("bank-account-changes", {"employee_id": 1, "details": "FNB", "description": "62001234567"})
    assert res.ok


def test_bad_date_rejected():
    res = validate_record("loans", {"employee_id": 1, "amount": 10, "date": "2025-02-30"})
    assert _fields(res) == {"date"}


def test_record_type_locked_to_kind():
    assert "record_type" in _fields(validate_record("loans", {
        "employee_id": 1, "amount": 10, "record_type": "Advance"}))
    res = validate_record("allowances", {"employee_id": 1, "amount": 10})
    assert res.value["record_type"] == "Escort Allowance"
    res = validate_record("allowances", {"employee_id": 1, "amount": 10, "recordType": "Commission"})
    assert res.value["record_type"] == "Commission"
    assert "record_type" in _fields(validate_record("allowances", {
        "employee_id": 1, "amount": 10, "record_type": "Loan"}))


def test_overtime_rate_default_and_no_amount():
    res = validate_record("overtime", {"employee_id": 1, "hours": 4})
    assert res.ok
    assert res.value["rate"] == Decimal("1.5")
    assert res.value["amount"] is None


def test_partial_validates_only_supplied_fields():
    res = validate_record("leave", {"notes": "doctor's note received"}, partial=True)
    assert res.ok
    assert res.value == {"notes": "doctor's note received"}

    res = validate_record("leave", {"end_date": "nope"}, partial=True)
    assert _fields(res) == {"end_date"}

    res = validate_record("leave", {"employee_id": None}, partial=True)
    assert _fields(res) == {"employee_id"}


def test_status_is_authoritative_over_approved():
    res = validate_record("overtime", {"employee_id": 1, "hours": 2, "approved": True})
    assert res.value["status"] == "Approved" and res.value["approved"] is True

    res = validate_record("overtime", {"employee_id": 1, "hours": 2, "approved": True, "status": "Rejected"})
    assert res.value["status"] == "Rejected" and res.value["approved"] is False

    res = validate_record("leave", {"status": "Approved"}, partial=True)
    assert res.value == {"status": "Approved", "approved": True}

    res = validate_record("leave", {"approved": False}, partial=True)
    assert res.value == {"status": "Pending", "approved": False}


def test_non_object_input_and_unknown_kind():
    res = validate_record("loans", ["not", "a", "dict"])
    assert not res.ok and res.errors[0]["field"] == "__all__"
    with pytest.raises(KeyError):
        validate_record("payslips", {})


def test_other_schemas():
    res = validate_record("policy-payments", {"amount": 150, "month": "2025-03-17"})
    assert res.value["month"] == date(2025, 3, 1)
    assert res.value["payment_method"] == "Payroll Deduction"

    assert _fields(validate_record("maternity-records", {
        "employee_id": 1, "from_date": "2025-06-01", "to_date": "2025-05-01"})) == {"to_date"}
    assert _fields(validate_record("archive-records", {"record_types": []})) == {"record_types"}
    assert _fields(validate_record("archive-records", {"record_types": ["Leave"]})) == {"record_types"}

    res = validate_record("employees", {"employee_code": 1001, "first_name": "A", "last_name": "B", "position": "Guard"})
    assert res.ok
    assert res.value["employee_code"] == "1001"
    assert res.value["company"] == "Butters"


def test_every_kind_has_a_default_type_it_accepts():
    for kind in KINDS.values():
        assert kind.default_type in kind.record_types
        assert kind.schema.model_fields["record_type"].default == kind.default_type
