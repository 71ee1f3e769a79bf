import json

from training_app.core.config import settings
from training_app.schemas.import_schema import ImportKind
from training_app.services import import_service

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200


# ---------- employees ----------

def test_list_and_filter_employees(client):
    r = client.get("/employees")
    assert r.status_code == 200
    assert [e["id"] for e in r.json()] == ["EMP001", "EMP002"]
    assert r.json()[0]["nameInternational"] == "John Doe"

    r = client.post("/employees/emp002/status")
    assert r.status_code == 200
    assert r.json()["isActive"] is False

    r = client.get("/employees", params={"status_filter": "resigned"})
    assert [e["id"] for e in r.json()] == ["EMP002"]

    r = client.get("/employees", params={"status_filter": "bogus"})
    assert r.status_code == 400


def test_upsert_employee_route(client, store):
    r = client.post("/employees", json={"id": " emp001 ", "nameLocal": "จอห์น", "department": "R&D"})
    assert r.status_code == 200
    assert r.json()["department"] == "R&D"
    assert len(store.get().employees) == 2

    r = client.post("/employees", json={"id": "  "})
    assert r.status_code == 400


def test_toggle_and_delete_unknown_employee(client):
    assert client.post("/employees/NOPE/status").status_code == 404
    assert client.delete("/employees/NOPE").status_code == 404


def test_delete_employee_route(client, store):
    r = client.delete("/employees/EMP001")
    assert r.status_code == 204
    state = store.get()
    assert all(reg.employee_id != "EMP001" for reg in state.registrations)
    assert {a.registration_id for a in state.attendance} == set()


def test_employee_report_route(client):
    r = client.get("/employees/EMP001/report")
    assert r.status_code == 200
    body = r.json()
    assert body["total_hours"] == 12
    assert body["employee"]["nameInternational"] == "John Doe"
    assert client.get("/employees/NOPE/report").status_code == 404


# ---------- courses & training ----------

def test_upsert_course_route(client):
    r = client.post("/courses", json={"code": "NEW1", "nameInternational": "New", "totalHours": 2})
    assert r.status_code == 200
    assert r.json()["category"] == "Technical"

    r = client.post("/courses", json={"code": "NEW2", "nameInternational": "Bad", "totalHours": 0})
    assert r.status_code == 400
    assert len(client.get("/courses").json()) == 4


def test_session_registration_attendance_flow(client):
    r = client.post("/training/sessions", json={
        "courseCode": "SAFE505", "startDate": "2024-09-01", "location": "Room B", "trainer": "Ann",
    })
    assert r.status_code == 201
    session_id = r.json()["id"]
    assert r.json()["endDate"] == "2024-09-01"

    r = client.post("/training/registrations", json={"employeeId": "EMP002", "sessionId": session_id})
    assert r.status_code == 201
    reg_id = r.json()["id"]
    assert r.json()["status"] == "Registered"

    r = client.post("/training/registrations", json={"employeeId": " emp002", "sessionId": session_id})
    assert r.status_code == 409

    r = client.post("/training/attendance", json={"registrationId": reg_id, "date": "2024-09-01", "hours": 5})
    assert r.status_code == 201

    regs = {reg["id"]: reg for reg in client.get("/training/registrations").json()}
    assert regs[reg_id]["status"] == "Partially Attended"

    recent = client.get("/training/registrations/recent", params={"limit": 1}).json()
    assert recent[0]["registration_id"] == reg_id
    assert recent[0]["hours"] == 5


def test_manual_history_route(client):
    payload = {"employeeId": "EMP001", "courseCode": "SEC101", "date": "2024-05-01", "hours": 4}
    r = client.post("/training/history", json=payload)
    assert r.status_code == 201
    assert r.json()["status"] == "Attended"

    sessions = client.get("/training/sessions").json()
    assert sum(1 for s in sessions if s["location"] == "Manual Entry") == 1

    r = client.post("/training/history", json={**payload, "hours": -1})
    assert r.status_code == 400


# ---------- import ----------

def test_import_rows_route(client):
    rows = [{"ID": "E10", "Name_EN": "Ten"}, {"ID": "", "Name_EN": "Nobody"}]
    r = client.post("/import/employee/rows", json=rows)
    assert r.status_code == 200
    body = r.json()
    assert body["rows_received"] == 2
    assert body["rows_imported"] == 1
    assert body["summary"] == "1 error"
    assert body["errors"][0].startswith("Row 3:")


def test_import_workbook_route(client, store):
    content = import_service.template_workbook(ImportKind.history)
    r = client.post("/import/history", files={"file": ("history.xlsx", content, XLSX)})
    assert r.status_code == 200
    assert r.json()["errors"] == ["Row 2: Course Code C001 not found in database"]

    r = client.post("/import/course", files={"file": ("courses.xlsx", import_service.template_workbook(ImportKind.course), XLSX)})
    assert r.json()["summary"] == "0 errors"

    r = client.post("/import/history", files={"file": ("history.xlsx", content, XLSX)})
    assert r.json()["errors"] == []
    assert store.get().attendance[-1].hours == 4


def test_import_rejects_unreadable_file(client):
    r = client.post("/import/employee", files={"file": ("x.xlsx", b"garbage", XLSX)})
    assert r.status_code == 400


def test_download_template(client):
    r = client.get("/import/templates/course")
    assert r.status_code == 200
    assert r.headers["content-type"] == XLSX
    assert "course_template.xlsx" in r.headers["content-disposition"]
    assert client.get("/import/templates/unknown").status_code == 422


# ---------- backup & reports ----------

def test_export_and_import_snapshot(client, store):
    r = client.get("/backup/export")
    assert r.status_code == 200
    assert "training_backup_" in r.headers["content-disposition"]
    exported = r.content

    client.delete("/employees/EMP001")
    r = client.post("/backup/import", files={"file": ("backup.json", exported, "application/json")})
    assert r.status_code == 200
    assert r.json()["employees"] == 2
    assert json.loads(store.export_snapshot()) == json.loads(exported)


def test_import_malformed_snapshot(client, store):
    before = store.get()
    r = client.post("/backup/import", files={"file": ("backup.json", b'{"employees": []}', "application/json")})
    assert r.status_code == 422
    assert store.get() is before


def test_archive_routes(client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "BACKUP_DIRECTORY", str(tmp_path))

    r = client.post("/backup/archive")
    assert r.status_code == 200
    filename = r.json()["filename"]

    r = client.get(f"/backup/archive/{filename}")
    assert r.status_code == 200
    assert r.json()["courses"][0]["code"] == "SEC101"

    assert client.get("/backup/archive/training_backup_missing.json").status_code == 404


def test_dashboard_overview_route(client):
    r = client.get("/reports/overview")
    assert r.status_code == 200
    assert r.json()["total_staff"] == 2
