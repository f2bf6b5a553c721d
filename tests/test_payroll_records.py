from payroll_api.extensions import db
from payroll_api.models.audit import ActivityLog
from payroll_api.models.payroll_record import ArchivedPayrollRecord, PayrollRecord


def _leave(emp_id, **kw):
    body = {
        "employeeId": emp_id, "details": "Annual Leave", "date": "2025-04-20",
        "startDate": "2025-05-01", "endDate": "2025-05-05",
    }
    body.update(kw)
    return body


def _create(client, headers, slug, body):
    r = client.post(f"/api/{slug}", json=body, headers=headers)
    assert r.status_code == 201, r.get_json()
    return r.get_json()["data"]


def test_create_leave_derives_total_days_and_lists_with_employee(client, auth, employees):
    h = auth()
    rec = _create(client, h, "leave", _leave(employees["jane"]))
    assert rec["total_days"] == 5
    assert rec["status"] == "Pending"
    assert rec["approved"] is False and rec["recurring"] is False

    r = client.get("/api/leave?company=Butters&startDate=2025-04-01&endDate=2025-04-30", headers=h)
    body = r.get_json()
    assert r.status_code == 200
    assert [x["id"] for x in body["data"]] == [rec["id"]]
    assert body["data"][0]["employee_name"] == "Jane Doe"
    assert body["data"][0]["company"] == "Butters"
    assert body["meta"]["total"] == 1

    r = client.get("/api/leave?company=Makana", headers=h)
    assert r.get_json()["data"] == []


def test_manual_total_days_kept_on_create(client, auth, employees):
    rec = _create(client, auth(), "leave", _leave(employees["jane"], totalDays=3.5))
    assert rec["total_days"] == 3.5


def test_list_is_newest_first(client, auth, employees):
    h = auth()
    a = _create(client, h, "loans", {"employee_id": employees["jane"], "amount": 100, "date": "2025-01-10"})
    b = _create(client, h, "loans", {"employee_id": employees["john"], "amount": 200, "date": "2025-03-10"})
    c = _create(client, h, "loans", {"employee_id": employees["john"], "amount": 300, "date": "2025-03-10"})
    ids = [x["id"] for x in client.get("/api/loans", headers=h).get_json()["data"]]
    assert ids == [c["id"], b["id"], a["id"]]


def test_create_logs_activity(client, auth, employees, users):
    _create(client, auth(), "leave", _leave(employees["jane"]))
    entry = ActivityLog.query.order_by(ActivityLog.id.desc()).first()
    assert entry.action == "Create Leave Record"
    assert entry.details == "Created Annual Leave record for Jane Doe"
    assert entry.user_id == users["HR Manager"]


def test_validation_error_is_422_with_field_breakdown(client, auth, employees):
    r = client.post("/api/leave", json=_leave(employees["jane"], endDate="2025-04-01"), headers=auth())
    assert r.status_code == 422
    err = r.get_json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert err["errors"] == [{"field": "end_date", "message": "end_date must be on or after start_date"}]
    assert PayrollRecord.query.count() == 0


def test_unknown_employee_is_persistence_error(client, auth, employees):
    r = client.post("/api/advances", json={"employeeId": 999, "amount": 50}, headers=auth())
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "PERSISTENCE_ERROR"
    assert ActivityLog.query.count() == 0


def test_overtime_amount_is_never_derived(client, auth, employees):
    h = auth()
    rec = _create(client, h, "overtime", {"employee_id": employees["john"], "hours": 4, "rate": 2})
    assert rec["hours"] == 4 and rec["rate"] == 2
    assert rec["amount"] is None

    rec = _create(client, h, "overtime", {"employee_id": employees["john"], "hours": 3})
    assert rec["rate"] == 1.5
    assert rec["amount"] is None

    rec = client.patch(f"/api/overtime/{rec['id']}", json={"hours": 10}, headers=h).get_json()["data"]
    assert rec["amount"] is None


def test_update_with_same_values_changes_nothing(client, auth, employees):
    h = auth()
    rec = _create(client, h, "leave", _leave(employees["jane"], notes="first"))
    logs_before = ActivityLog.query.count()

    r = client.put(f"/api/leave/{rec['id']}", json=_leave(employees["jane"], notes="first"), headers=h)
    assert r.status_code == 200
    assert r.get_json()["data"] == rec
    assert ActivityLog.query.count() == logs_before


def test_update_recomputes_total_days_unless_overridden(client, auth, employees):
    h = auth()
    rec = _create(client, h, "leave", _leave(employees["jane"]))

    rec = client.patch(f"/api/leave/{rec['id']}", json={"endDate": "2025-05-10"}, headers=h).get_json()["data"]
    assert rec["total_days"] == 10

    rec = client.patch(f"/api/leave/{rec['id']}", json={"totalDays": 8}, headers=h).get_json()["data"]
    assert rec["total_days"] == 8

    rec = client.patch(f"/api/leave/{rec['id']}", json={"startDate": "2025-05-02", "totalDays": 7.5},
                       headers=h).get_json()["data"]
    assert rec["total_days"] == 7.5
    assert rec["start_date"] == "2025-05-02"


def test_update_checks_span_against_stored_values(client, auth, employees):
    h = auth()
    rec = _create(client, h, "leave", _leave(employees["jane"]))
    r = client.patch(f"/api/leave/{rec['id']}", json={"startDate": "2025-06-01"}, headers=h)
    assert r.status_code == 422
    assert r.get_json()["error"]["errors"][0]["field"] == "end_date"


def test_status_update_keeps_approved_in_sync(client, auth, employees):
    h = auth()
    rec = _create(client, h, "bank-account-changes", {
        "employee_id": employees["jane"], "details": "Capitec", "description": "1234567890", "approved": True})
    assert rec["status"] == "Approved" and rec["approved"] is True

    rec = client.patch(f"/api/bank-account-changes/{rec['id']}", json={"status": "Rejected"},
                       headers=h).get_json()["data"]
    assert rec["status"] == "Rejected" and rec["approved"] is False


def test_update_and_delete_missing_ids_are_404(client, auth, employees):
    h = auth()
    assert client.put("/api/leave/4242", json={"notes": "x"}, headers=h).status_code == 404
    r = client.delete("/api/leave/4242", headers=h)
    assert r.status_code == 404
    assert r.get_json()["error"]["code"] == "NOT_FOUND"


def test_delete_removes_from_list(client, auth, employees):
    h = auth()
    rec = _create(client, h, "terminations", {"employee_id": employees["john"], "details": "Resigned"})
    r = client.delete(f"/api/terminations/{rec['id']}", headers=h)
    assert r.get_json()["data"] == {"id": rec["id"], "deleted": True}
    assert client.get("/api/terminations", headers=h).get_json()["data"] == []
    assert client.delete(f"/api/terminations/{rec['id']}", headers=h).status_code == 404


def test_kinds_do_not_leak_into_each_other(client, auth, employees):
    h = auth()
    loan = _create(client, h, "loans", {"employee_id": employees["jane"], "amount": 500})
    assert client.get(f"/api/advances/{loan['id']}", headers=h).status_code == 404
    assert client.get("/api/advances", headers=h).get_json()["data"] == []


def test_allowances_share_one_endpoint(client, auth, employees):
    h = auth()
    _create(client, h, "allowances", {"employee_id": employees["jane"], "amount": 100, "recurring": True})
    _create(client, h, "allowances", {"employee_id": employees["john"], "amount": 40,
                                      "recordType": "Commission", "status": "Approved"})
    rows = client.get("/api/allowances", headers=h).get_json()["data"]
    assert {r["record_type"] for r in rows} == {"Escort Allowance", "Commission"}
    rows = client.get("/api/allowances?recordType=Commission", headers=h).get_json()["data"]
    assert len(rows) == 1

    summary = client.get("/api/allowances/summary", headers=h).get_json()["data"]
    assert summary["total"] == 140
    assert summary["by_company"] == {"Butters": 100, "Makana": 40}
    assert summary["count"] == 2
    assert summary["approved_count"] == 1
    assert summary["recurring_count"] == 1


def test_roles_gate_writes(client, auth, employees):
    body = {"employee_id": employees["jane"], "amount": 10}
    assert client.post("/api/advances", json=body).status_code == 401
    assert client.post("/api/advances", json=body, headers=auth("Viewer")).status_code == 403
    assert client.get("/api/advances", headers=auth("Viewer")).status_code == 200
    assert client.post("/api/advances", json=body, headers=auth("Payroll Officer")).status_code == 201
    assert client.post("/api/advances", json=body, headers=auth("Admin")).status_code == 201


def test_archive_moves_rows_in_one_batch(client, auth, employees, users):
    h = auth()
    for amount in (100, 200):
        _create(client, h, "advances", {"employee_id": employees["jane"], "amount": amount})
    _create(client, h, "loans", {"employee_id": employees["john"], "amount": 900})
    leave = _create(client, h, "leave", _leave(employees["jane"]))

    assert client.post("/api/archive-records", json={"recordTypes": ["Advance", "Loan"]},
                       headers=h).status_code == 403

    r = client.post("/api/archive-records", json={"recordTypes": ["Advance", "Loan"]}, headers=auth("Admin"))
    assert r.status_code == 200
    assert r.get_json()["data"] == {"archived": 3, "by_type": {"Advance": 2, "Loan": 1}}

    assert client.get("/api/advances", headers=h).get_json()["data"] == []
    assert client.get("/api/loans", headers=h).get_json()["data"] == []
    assert [x["id"] for x in client.get("/api/leave", headers=h).get_json()["data"]] == [leave["id"]]

    assert ArchivedPayrollRecord.query.count() == 3
    archived = client.get("/api/archived-records?recordType=Advance", headers=h).get_json()["data"]
    assert len(archived) == 2
    assert all(a["archived_by"] == users["Admin"] for a in archived)
    assert ActivityLog.query.filter_by(action="Archive Records").count() == 1


def test_archive_rejects_bad_type_lists(client, auth, employees):
    h = auth("Admin")
    assert client.post("/api/archive-records", json={"recordTypes": []}, headers=h).status_code == 422
    assert client.post("/api/archive-records", json={"recordTypes": ["Leave"]}, headers=h).status_code == 422


def test_dashboard(client, auth, employees):
    h = auth()
    _create(client, h, "leave", _leave(employees["jane"]))
    _create(client, h, "overtime", {"employee_id": employees["john"], "hours": 6.5})
    data = client.get("/api/dashboard", headers=h).get_json()["data"]
    assert data["employee_count"] == 2
    assert data["employees_by_company"] == {"Butters": 1, "Makana": 1}
    assert data["pending_leave_count"] == 1
    assert data["overtime_hours"] == 6.5
    assert data["last_updated"]


def test_service_layer_without_http(app, employees, users):
    from payroll_api.services import payroll_records as svc

    rec = svc.create_record("maternity-leave", {
        "employee_id": employees["jane"], "start_date": "2025-01-01", "end_date": "2025-04-30",
    }, users["Admin"])
    assert rec["total_days"] == 120
    assert svc.get_record("maternity-leave", rec["id"])["employee_name"] == "Jane Doe"
    assert db.session.get(PayrollRecord, rec["id"]).created_by == users["Admin"]


def test_resending_stored_dates_keeps_manual_total_days(client, auth, employees):
    h = auth()
    rec = _create(client, h, "leave", _leave(employees["jane"], totalDays=3.5))
    logs_before = ActivityLog.query.count()

    r = client.put(f"/api/leave/{rec['id']}", json=_leave(employees["jane"]), headers=h)
    assert r.status_code == 200
    assert r.get_json()["data"]["total_days"] == 3.5
    assert ActivityLog.query.count() == logs_before


def test_list_rejects_values_outside_the_enums(client, auth, employees):
    h = auth()
    _create(client, h, "leave", _leave(employees["jane"]))

    for query, field in (
        ("status=Foo", "status"),
        ("company=Acme", "company"),
        ("recordType=Loan", "record_type"),
        ("employeeId=abc", "employee_id"),
    ):
        r = client.get(f"/api/leave?{query}", headers=h)
        assert r.status_code == 422, query
        assert r.get_json()["error"]["errors"][0]["field"] == field

    assert client.get("/api/leave/summary?status=Nope", headers=h).status_code == 422
    assert client.get("/api/archived-records?recordType=Leave", headers=h).status_code == 422
    assert client.get("/api/employees?status=Pending", headers=h).status_code == 422
    assert len(client.get("/api/leave?status=Pending&company=all", headers=h).get_json()["data"]) == 1


def test_list_rejects_dates_that_do_not_parse(client, auth, employees):
    h = auth()
    _create(client, h, "loans", {"employee_id": employees["jane"], "amount": 100, "date": "2025-01-10"})

    r = client.get("/api/loans?startDate=2025-13-45", headers=h)
    assert r.status_code == 422
    assert r.get_json()["error"]["errors"] == [
        {"field": "start_date", "message": "start_date must be a valid date (YYYY-MM-DD)"}]
    assert client.get("/api/maternity-records?endDate=soon", headers=h).status_code == 422
    assert client.get("/api/policies/report?month=2025-02-30", headers=h).status_code == 422
    assert len(client.get("/api/loans?startDate=2025-01-01", headers=h).get_json()["data"]) == 1
