from tests.helpers import at


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_form_for_navigation_child(client):
    response = client.get("/api/reports/form", params={"child": "Ana"})
    assert response.status_code == 200
    body = response.json()
    assert body["child_name"] == "Ana"
    assert body["in_time"] == "09:15"
    assert body["email"] == "ana@example.com"


def test_draft_then_submit_flow(client):
    form = client.get("/api/reports/form", params={"child": "Ana"}).json()

    draft = client.post("/api/reports/draft", json=form)
    assert draft.status_code == 200
    assert draft.json()["created"] is True
    assert draft.json()["report_status"] == "partial"

    form["notes"] = "Lovely day"
    form["meal"] = "All"
    submitted = client.post("/api/reports/submit", json=form)
    assert submitted.status_code == 200
    assert submitted.json()["report_id"] == draft.json()["report_id"]
    assert submitted.json()["created"] is False

    reports = client.get("/api/reports/today").json()
    assert reports["Ana"]["report_status"] == "full"
    assert reports["Ana"]["in_time"] == "09:15 AM"

    assert client.get("/api/reports/eligible").json() == {"children": []}
    assert client.get("/api/reports/eligible", params={"selected": "Ana"}).json() == {"children": ["Ana"]}
    assert client.get("/api/reports/access/Ana").status_code == 403


def test_submit_without_child_is_rejected(client):
    response = client.post("/api/reports/submit", json={"notes": "x"})
    assert response.status_code == 400
    assert client.get("/api/reports/today").json() == {}


def test_form_sync_and_change(client):
    synced = client.post("/api/reports/form/sync", json={"child_name": "Ana", "in_time": "10:00"}).json()
    assert synced["in_time"] == "10:00"
    assert synced["email"] == "ana@example.com"

    changed = client.post(
        "/api/reports/form/change",
        json={"form": {**synced, "sleep_from": "13:00"}, "field": "sleep_not", "value": True},
    ).json()
    assert changed["sleep_not"] is True
    assert changed["sleep_from"] == ""

    bad = client.post("/api/reports/form/change", json={"form": synced, "field": "nope", "value": "x"})
    assert bad.status_code == 400


def test_mark_attendance_and_today(client):
    response = client.post("/api/attendance/mark", json={"child_name": "Cleo", "status": "present"})
    assert response.status_code == 200
    assert response.json()["persisted"] is True

    today = client.get("/api/attendance/today").json()
    assert today["attendance"]["Cleo"]["status"] == "present"
    assert today["marked_count"] == 3
    assert today["auto_absent_done"] is False

    assert client.post("/api/attendance/mark", json={"child_name": "Cleo", "status": "late"}).status_code == 400
    assert client.post("/api/attendance/mark", json={"child_name": "Zed", "status": "present"}).status_code == 400


def test_auto_absent_runs_on_first_request_after_noon(client, clock):
    clock.now = at(12, 30)
    today = client.get("/api/attendance/today").json()
    assert today["attendance"]["Cleo"]["status"] == "absent"
    assert today["auto_absent_done"] is True


def test_children_roster(client):
    assert [kid["name"] for kid in client.get("/api/children/").json()] == ["Ana", "Ben", "Cleo"]

    created = client.post("/api/children/", json={"name": "Dev", "email": "dev@example.com"})
    assert created.status_code == 201
    assert client.post("/api/children/", json={"name": "Dev"}).status_code == 400
    assert client.post("/api/children/", json={"name": "  "}).status_code == 422
    assert client.post("/api/children/", json={"name": "A.na"}).status_code == 422
    assert client.post("/api/children/", json={"name": "$Ana"}).status_code == 422
    assert "Dev" in [kid["name"] for kid in client.get("/api/children/").json()]


def test_themes_and_summary(client):
    saved = client.put(
        "/api/settings/themes",
        json={"theme": ["Leaves", "Rain"], "theme_of_the_day": ["Leaves"], "common_parents_note": "Bring boots"},
    )
    assert saved.status_code == 200
    assert saved.json() == {
        "weekly_themes": ["Leaves", "Rain"],
        "day_themes": ["Leaves"],
        "common_parents_note": "Bring boots",
    }

    form = client.get("/api/reports/form", params={"child": "Ana"}).json()
    assert form["themes"] == ["Leaves"]
    assert form["common_parents_note"] == "Bring boots"

    summary = client.get("/api/dashboard/summary").json()
    assert summary["date"] == "2026-10-19"
    assert summary["marked_count"] == 2
    assert summary["weekly_theme"]["summary"] == "Leaves, Rain"
    assert [child["name"] for child in summary["children"]] == ["Ana", "Cleo", "Ben"]
    assert summary["children"][0]["report_state_label"] == "Not filled"


def test_out_time_requires_full_report(client):
    assert client.post("/api/reports/Ana/out-time").status_code == 400


def test_export_csv(client):
    response = client.get("/api/dashboard/export", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("Child,Attendance,Check-in")
    assert lines[1].startswith("Ana,present,09:15")
    assert lines[3].startswith("Ben,absent")


def test_app_debug_follows_settings():
    from daycare.config import settings
    from daycare.main import app

    assert app.debug is settings.debug
