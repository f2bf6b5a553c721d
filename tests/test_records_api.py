import io

from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.insurance import InsurancePolicy, PolicyPayment
from payroll_api.models.overtime_rate import OvertimeRate


def _post(client, url, body, headers, status=201):
    r = client.post(url, json=body, headers=headers)
    assert r.status_code == status, r.get_json()
    return r.get_json()["data"]


# ---------- recurring deductions ----------

def test_recurring_deduction_gets_reference_after_insert(client, auth, employees):
    h = auth()
    d = _post(client, "/api/recurring-deductions", {
        "employeeId": employees["jane"], "deductionName": "Loan Repayment", "amount": 250,
        "startDate": "2025-01-01",
    }, h)
    assert d["reference_number"] == f"RD{d['id']:06d}"
    assert len(d["reference_number"]) == 8
    assert d["frequency"] == "monthly"
    assert d["approved"] is False and d["active"] is True

    rows = client.get("/api/recurring-deductions?company=Butters", headers=h).get_json()["data"]
    assert [r["reference_number"] for r in rows] == [d["reference_number"]]
    assert client.get("/api/recurring-deductions?company=Makana", headers=h).get_json()["data"] == []


def test_recurring_deduction_update_and_delete(client, auth, employees):
    h = auth()
    d = _post(client, "/api/recurring-deductions", {
        "employee_id": employees["john"], "deduction_name": "Pension", "amount": 80}, h)
    r = client.patch(f"/api/recurring-deductions/{d['id']}", json={"endDate": "2020-01-01"}, headers=h)
    assert r.status_code == 422
    upd = client.patch(f"/api/recurring-deductions/{d['id']}", json={"active": False}, headers=h).get_json()["data"]
    assert upd["active"] is False
    assert upd["reference_number"] == d["reference_number"]
    assert client.delete(f"/api/recurring-deductions/{d['id']}", headers=h).status_code == 200
    assert client.get(f"/api/recurring-deductions/{d['id']}", headers=h).status_code == 404


# ---------- policies ----------

def _policy(client, h, emp_id, **kw):
    body = {"employeeId": emp_id, "company": "Sanlam Sky", "policyNumber": "SS-1001",
            "amount": 320, "startDate": "2025-01-01"}
    body.update(kw)
    return _post(client, "/api/policies", body, h)


def test_policy_payments_cascade_with_policy(client, auth, employees):
    h = auth()
    p = _policy(client, h, employees["jane"])
    assert p["status"] == "Active"

    pay = _post(client, f"/api/policies/{p['id']}/payments", {"amount": 320, "month": "2025-02-15"}, h)
    assert pay["month"] == "2025-02-01"
    assert pay["payment_method"] == "Payroll Deduction"
    _post(client, f"/api/policies/{p['id']}/payments", {"amount": 320, "month": "2025-01-01"}, h)

    detail = client.get(f"/api/policies/{p['id']}", headers=h).get_json()["data"]
    assert [x["month"] for x in detail["payments"]] == ["2025-01-01", "2025-02-01"]

    r = client.delete(f"/api/policies/{p['id']}", headers=h).get_json()["data"]
    assert r["payments_deleted"] == 2
    assert PolicyPayment.query.count() == 0


def test_payment_for_missing_policy(client, auth, employees):
    h = auth()
    r = client.post("/api/policies/999/payments", json={"amount": 1, "month": "2025-01-01"}, headers=h)
    assert r.status_code == 409
    assert client.get("/api/policies/999/payments", headers=h).status_code == 404


def test_policy_update_stamps_updater_and_report(client, auth, employees, users):
    h = auth()
    p = _policy(client, h, employees["jane"])
    _policy(client, h, employees["john"], company="Avbob", policyNumber="AV-7", amount=150, status="Suspended")
    upd = client.patch(f"/api/policies/{p['id']}", json={"amount": 350}, headers=h).get_json()["data"]
    assert upd["amount"] == 350
    assert upd["updated_by"] == users["HR Manager"]
    assert upd["updated_at"]

    _post(client, f"/api/policies/{p['id']}/payments", {"amount": 350, "month": "2025-03-01"}, h)
    rep = client.get("/api/policies/report?month=2025-03-20", headers=h).get_json()["data"]
    assert rep["insurers"]["Sanlam Sky"]["active"] == 1
    assert rep["insurers"]["Sanlam Sky"]["paid_total"] == 350
    assert rep["insurers"]["Avbob"]["active"] == 0
    assert rep["insurers"]["Avbob"]["policies"] == 1

    rows = client.get("/api/policies?company=Avbob", headers=h).get_json()["data"]
    assert [r["policy_number"] for r in rows] == ["AV-7"]
    rows = client.get("/api/policies?company=Butters", headers=h).get_json()["data"]
    assert [r["policy_number"] for r in rows] == ["SS-1001"]


# ---------- maternity ----------

def test_maternity_record_reports_span_length(client, auth, employees):
    h = auth()
    m = _post(client, "/api/maternity-records", {
        "employeeId": employees["jane"], "fromDate": "2025-03-01", "toDate": "2025-03-31",
        "comments": "expected return April"}, h)
    assert m["total_days"] == 31
    r = client.post("/api/maternity-records", json={
        "employeeId": employees["jane"], "fromDate": "2025-03-31", "toDate": "2025-03-01"}, headers=h)
    assert r.status_code == 422
    rows = client.get("/api/maternity-records?startDate=2025-03-15&endDate=2025-04-15", headers=h).get_json()["data"]
    assert [x["id"] for x in rows] == [m["id"]]


# ---------- employees ----------

def test_employee_create_duplicate_code_and_terminate(client, auth, employees):
    h = auth()
    e = _post(client, "/api/employees", {"employeeCode": "E100", "firstName": "Thandi", "lastName": "Mokoena",
                                         "position": "Guard", "company": "Makana"}, h)
    assert e["status"] == "Active"
    r = client.post("/api/employees", json={"employeeCode": "E100", "firstName": "X", "lastName": "Y",
                                            "position": "Guard"}, headers=h)
    assert r.status_code == 409

    r = client.delete(f"/api/employees/{e['id']}", headers=h)
    assert r.get_json()["data"]["status"] == "Terminated"
    assert db.session.get(Employee, e["id"]) is not None

    rows = client.get("/api/employees?status=Active&q=mok", headers=h).get_json()["data"]
    assert rows == []
    rows = client.get("/api/employees?q=DOE", headers=h).get_json()["data"]
    assert [r["employee_code"] for r in rows] == ["E001"]


def test_employee_import_json_creates_and_updates(client, auth, employees):
    h = auth()
    r = client.post("/api/employees/import", json={"rows": [
        {"employee_code": "E001", "position": "Senior Guard"},
        {"employeeCode": "E300", "firstName": "Sipho", "lastName": "Dlamini", "position": "Driver",
         "company": "Makana", "baseSalary": "8500"},
        {"employee_code": "E301", "first_name": "No", "last_name": "Position"},
    ]}, headers=h)
    data = r.get_json()["data"]
    assert (data["created"], data["updated"], data["rejected"]) == (1, 1, 1)
    assert data["errors"][0]["row"] == 3
    assert data["errors"][0]["errors"][0]["field"] == "position"

    jane = db.session.get(Employee, employees["jane"])
    assert jane.position == "Senior Guard"
    assert jane.first_name == "Jane"
    assert Employee.query.filter_by(employee_code="E300").one().company == "Makana"


def test_employee_import_csv_file(client, auth, employees):
    csv_text = "Employee Code,First Name,Last Name,Position,Company\nE400,Lerato,Nkosi,Guard,Butters\n"
    r = client.post(
        "/api/employees/import",
        data={"file": (io.BytesIO(csv_text.encode("utf-8")), "staff.csv")},
        content_type="multipart/form-data",
        headers=auth(),
    )
    assert r.status_code == 200, r.get_json()
    assert r.get_json()["data"]["created"] == 1
    assert Employee.query.filter_by(employee_code="E400").one().first_name == "Lerato"


# ---------- reports, exports, activity ----------

def test_report_data_for_month(client, auth, employees):
    h = auth()
    _post(client, "/api/overtime", {"employeeId": employees["jane"], "hours": 5, "date": "2025-05-03"}, h)
    _post(client, "/api/loans", {"employeeId": employees["john"], "amount": 400, "date": "2025-05-20",
                                 "status": "Approved"}, h)
    _post(client, "/api/loans", {"employeeId": employees["john"], "amount": 100, "date": "2025-06-01"}, h)

    data = client.get("/api/reports/data?month=2025-05-01&recordTypes=Overtime,Loan", headers=h).get_json()["data"]
    assert data["start_date"] == "2025-05-01" and data["end_date"] == "2025-05-31"
    assert len(data["employees"]) == 2
    assert sorted(r["record_type"] for r in data["records"]) == ["Loan", "Overtime"]

    data = client.post("/api/reports/data", json={"month": "2025-05-01", "company": "Makana",
                                                  "includeUnapproved": False}, headers=h).get_json()["data"]
    assert [e["employee_code"] for e in data["employees"]] == ["E002"]
    assert [r["amount"] for r in data["records"]] == [400]


def test_export_records_and_activity_feed(client, auth, employees, users):
    h = auth()
    x = _post(client, "/api/export-records", {
        "exportType": "earnings", "fileUrl": "exports/2025-05.csv", "startDate": "2025-05-01",
        "endDate": "2025-05-31", "recordCount": 12}, h)
    assert x["file_format"] == "csv" and x["include_unapproved"] is False

    rows = client.get("/api/export-records", headers=h).get_json()["data"]
    assert rows[0]["user_name"] == "HR Manager User"

    feed = client.get("/api/activity-logs?limit=5", headers=h).get_json()["data"]
    assert feed[0]["action"] == "Export Records"
    assert feed[0]["user_name"] == "HR Manager User"


# ---------- overtime rates, users, auth, schemas ----------

def test_overtime_rates_admin_only(client, auth, users):
    from payroll_api.services.overtime_rates import seed_default_rates

    assert seed_default_rates(users["Admin"]) == ["Weekday", "Saturday", "Sunday", "Public Holiday"]
    assert seed_default_rates(users["Admin"]) == []
    rates = client.get("/api/overtime-rates", headers=auth("Viewer")).get_json()["data"]
    assert [r["overtime_type"] for r in rates] == ["Weekday", "Saturday", "Sunday", "Public Holiday"]

    sunday = OvertimeRate.query.filter_by(overtime_type="Sunday").one()
    assert client.patch(f"/api/overtime-rates/{sunday.id}", json={"rate": 2.5},
                        headers=auth()).status_code == 403
    r = client.patch(f"/api/overtime-rates/{sunday.id}", json={"rate": 2.5}, headers=auth("Admin"))
    assert r.get_json()["data"]["rate"] == 2.5
    r = client.post("/api/overtime-rates", json={"overtimeType": "Sunday", "rate": 3}, headers=auth("Admin"))
    assert r.status_code == 409


def test_login_and_me(client, users):
    r = client.post("/api/auth/login", json={"username": "hr", "password": "wrong-pass"})
    assert r.status_code == 401

    r = client.post("/api/auth/login", json={"username": "hr", "password": "secret123"})
    assert r.status_code == 200
    token = r.get_json()["data"]["access"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).get_json()["data"]
    assert me["username"] == "hr" and me["role"] == "HR Manager"


def test_user_management(client, auth, users):
    body = {"username": "clerk", "password": "clerk-pass", "fullName": "Pay Clerk", "role": "Payroll Officer"}
    assert client.post("/api/users", json=body, headers=auth()).status_code == 403
    u = _post(client, "/api/users", body, auth("Admin"))
    assert "password" not in u and "password_hash" not in u
    assert client.post("/api/users", json=body, headers=auth("Admin")).status_code == 409

    r = client.delete(f"/api/users/{u['id']}", headers=auth("Admin"))
    assert r.get_json()["data"]["active"] is False
    r = client.post("/api/auth/login", json={"username": "clerk", "password": "clerk-pass"})
    assert r.status_code == 403

    r = client.delete(f"/api/users/{users['Admin']}", headers=auth("Admin"))
    assert r.status_code == 400


def test_schema_endpoint(client, auth, users):
    h = auth("Viewer")
    kinds = client.get("/api/schemas", headers=h).get_json()["data"]
    assert "leave" in kinds and "policies" in kinds
    schema = client.get("/api/schemas/leave", headers=h).get_json()["data"]
    assert set(schema["required"]) >= {"employee_id", "start_date", "end_date", "details"}
    assert client.get("/api/schemas/nope", headers=h).status_code == 404


def test_health(client, app):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "ok"


# ---------- policy exports and import ----------

def test_policy_export_history(client, auth, users):
    h = auth()
    x = _post(client, "/api/policy-exports", {
        "exportName": "Avbob March", "company": "Avbob", "month": "2025-03-18", "totalAmount": 1250.5}, h)
    assert x["month"] == "2025-03-01"
    assert x["format"] == "csv"
    assert x["user_name"] == "HR Manager User"
    _post(client, "/api/policy-exports", {"exportName": "All insurers", "month": "2025-03-01",
                                          "totalAmount": 9000, "format": "xlsx"}, auth("Admin"))

    rows = client.get("/api/policy-exports", headers=h).get_json()["data"]
    assert [r["export_name"] for r in rows] == ["All insurers", "Avbob March"]
    rows = client.get("/api/policy-exports?company=Avbob", headers=h).get_json()["data"]
    assert [r["total_amount"] for r in rows] == [1250.5]
    rows = client.get(f"/api/policy-exports?userId={users['Admin']}", headers=h).get_json()["data"]
    assert [r["company"] for r in rows] == [None]
    assert client.get("/api/policy-exports?company=Acme", headers=h).status_code == 422
    assert client.post("/api/policy-exports", json={"exportName": "x", "month": "2025-03-01",
                                                    "totalAmount": 1}, headers=auth("Viewer")).status_code == 403


POLICY_CSV = (
    "Employee,Last Name,First Name,Company,Value,Comment,Status\n"
    "E001,Doe,Jane,Sanlam Sky,R320,POLICY NUMBER: SS-77,Active\n"
    ",Smith,John,Old Mutul,\"R 1,150.00\",POLICY NUMBER: OM-5,Cancelled\n"
    "E999,Ghost,Casper,Avbob,R100,POLICY NUMBER: AV-1,Active\n"
    "E001,Doe,Jane,Avbob,R90,no number here,Active\n"
)


def test_policy_import_from_csv(client, auth, employees):
    h = auth()
    r = client.post("/api/policies/import", data=POLICY_CSV, content_type="text/csv", headers=h)
    assert r.status_code == 200, r.get_json()
    data = r.get_json()["data"]
    assert (data["created"], data["updated"], data["rejected"]) == (2, 0, 2)
    assert [e["row"] for e in data["errors"]] == [3, 4]
    assert data["errors"][0]["errors"][0]["field"] == "employee_code"
    assert data["errors"][1]["errors"][0]["field"] == "policy_number"

    rows = client.get("/api/policies", headers=h).get_json()["data"]
    by_number = {p["policy_number"]: p for p in rows}
    assert by_number["SS-77"]["amount"] == 320 and by_number["SS-77"]["employee_id"] == employees["jane"]
    assert by_number["OM-5"]["company"] == "Old Mutual"
    assert by_number["OM-5"]["amount"] == 1150
    assert by_number["OM-5"]["status"] == "Cancelled"

    # same file again: the matches are updated in place, nothing is duplicated
    changed = POLICY_CSV.replace("R320", "R330")
    data = client.post("/api/policies/import", data=changed, content_type="text/csv",
                       headers=h).get_json()["data"]
    assert (data["created"], data["updated"]) == (0, 1)
    assert InsurancePolicy.query.count() == 2
    assert InsurancePolicy.query.filter_by(policy_number="SS-77").one().updated_by is not None


def test_policy_import_options_and_json_rows(client, auth, employees):
    h = auth()
    rows = [{"employeeCode": "E002", "company": "Avbob", "amount": "75", "policyNumber": "AV-9",
             "status": "active"}]
    data = client.post("/api/policies/import?add_new=false", json={"rows": rows},
                       headers=h).get_json()["data"]
    assert (data["created"], data["skipped"]) == (0, 1)

    data = client.post("/api/policies/import", json={"rows": rows}, headers=h).get_json()["data"]
    assert data["created"] == 1
    assert InsurancePolicy.query.one().status == "Active"

    rows[0]["amount"] = "80"
    data = client.post("/api/policies/import?update_existing=false", json={"rows": rows},
                       headers=h).get_json()["data"]
    assert (data["updated"], data["skipped"]) == (0, 1)
    assert client.post("/api/policies/import", json={}, headers=h).status_code == 422


# ---------- employee VIP codes ----------

def test_vip_code_request_and_issue(client, auth, employees):
    h = auth()
    eid = employees["john"]
    e = client.get(f"/api/employees/{eid}", headers=h).get_json()["data"]
    assert e["vip_code_status"] == "Not Requested" and e["vip_code_requested"] is False

    e = client.post(f"/api/employees/{eid}/vip-code/request", headers=h).get_json()["data"]
    assert e["vip_code_status"] == "Requested" and e["vip_code_requested"] is True
    assert e["vip_code_request_date"]

    r = client.put(f"/api/employees/{eid}/vip-code", json={"vipCodeStatus": "Issued"}, headers=h)
    assert r.status_code == 422
    e = client.put(f"/api/employees/{eid}/vip-code", json={"vipCode": "VIP0042"}, headers=h).get_json()["data"]
    assert e["vip_code"] == "VIP0042" and e["vip_code_status"] == "Issued"

    assert client.post(f"/api/employees/{eid}/vip-code/request", headers=h).status_code == 409
    assert client.post(f"/api/employees/{eid}/vip-code/request", headers=auth("Viewer")).status_code == 403


def test_employee_import_repeated_code_updates_the_new_row(client, auth, employees):
    rows = [
        {"employee_code": "E500", "first_name": "Ayanda", "last_name": "Zulu", "position": "Guard"},
        {"employee_code": "E500", "position": "Driver"},
    ]
    data = client.post("/api/employees/import", json={"rows": rows}, headers=auth()).get_json()["data"]
    assert (data["created"], data["updated"], data["rejected"]) == (1, 1, 0)
    assert Employee.query.filter_by(employee_code="E500").one().position == "Driver"
