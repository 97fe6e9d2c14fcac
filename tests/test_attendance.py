from datetime import date

from sqlalchemy.orm import Session

from models.attendance import DailyAttendance, YearlyAttendance
from models.communication import NotificationLog

YEAR = date.today().year
DAY = f"{YEAR}-03-02"


def test_unsaved_students_default_to_present(admin_client, make_student):
    make_student(2)
    make_student(1)
    data = admin_client.get(f"/attendance/get-data?date={DAY}").json()
    assert data["date"] == DAY
    assert [(s["roll_no"], s["status"], s["locked"]) for s in data["students"]] == [(1, "P", False), (2, "P", False)]


def test_save_inserts_rows_and_locks_them(admin_client, make_student, db):
    make_student(1)
    make_student(2)
    res = admin_client.post("/attendance/save", json={"date": DAY, "attendance": [{"roll_no": 2, "status": "A"}]})
    body = res.json()
    assert res.status_code == 200
    assert body["saved"] == 2

    rows = {r.roll_no: r.status for r in db.query(DailyAttendance).all()}
    assert rows == {1: "P", 2: "A"}

    data = admin_client.get(f"/attendance/get-data?date={DAY}").json()
    assert [(s["status"], s["locked"]) for s in data["students"]] == [("P", True), ("A", True)]


def test_existing_record_is_not_duplicated_or_changed(admin_client, make_student, db):
    make_student(1)
    admin_client.post("/attendance/save", json={"date": DAY, "attendance": [{"roll_no": 1, "status": "P"}]})
    make_student(2)

    res = admin_client.post("/attendance/save", json={
        "date": DAY, "attendance": [{"roll_no": 1, "status": "A"}, {"roll_no": 2, "status": "P"}],
    })
    assert res.json()["saved"] == 1

    rows = db.query(DailyAttendance).filter(DailyAttendance.roll_no == 1).all()
    assert len(rows) == 1
    assert rows[0].status == "P"


def test_save_when_everything_is_saved_is_a_noop(admin_client, make_student, db):
    make_student(1)
    admin_client.post("/attendance/save", json={"date": DAY, "attendance": []})

    res = admin_client.post("/attendance/save", json={"date": DAY, "attendance": [{"roll_no": 1, "status": "A"}]})
    body = res.json()
    assert res.status_code == 200
    assert body["status"] == "info"
    assert body["saved"] == 0
    assert body["message"] == f"All attendance already saved for {DAY}"
    assert db.query(DailyAttendance).count() == 1


def test_unknown_roll_number_aborts_save(admin_client, make_student, db):
    make_student(1)
    res = admin_client.post("/attendance/save", json={"date": DAY, "attendance": [{"roll_no": 99, "status": "A"}]})
    assert res.status_code == 404
    assert db.query(DailyAttendance).count() == 0


def test_invalid_status_and_date(admin_client, make_student):
    make_student(1)
    assert admin_client.post("/attendance/save", json={"attendance": [{"roll_no": 1, "status": "L"}]}).status_code == 422
    assert admin_client.post("/attendance/save", json={"date": "02-03-2026", "attendance": []}).status_code == 400


def test_yearly_stats_follow_daily_rows(admin_client, make_student, db):
    make_student(1)
    days = [f"{YEAR}-03-0{d}" for d in (2, 3, 4, 5)]
    for day, status in zip(days, ["P", "A", "P", "P"]):
        admin_client.post("/attendance/save", json={"date": day, "attendance": [{"roll_no": 1, "status": status}]})

    yearly = db.query(YearlyAttendance).filter(YearlyAttendance.roll_no == 1).one()
    assert (yearly.present_days, yearly.absent_days, yearly.percent_present) == (3, 1, 75.0)

    history = admin_client.get("/api/v1/yearly-attendance/1/history").json()
    assert [h["date"] for h in history] == days


def test_back_dated_save_keeps_current_year_stats(admin_client, make_student, db):
    make_student(1)
    for day in (f"{YEAR}-03-02", f"{YEAR}-03-03", f"{YEAR}-03-04"):
        admin_client.post("/attendance/save", json={"date": day, "attendance": [{"roll_no": 1, "status": "P"}]})

    res = admin_client.post("/attendance/save", json={
        "date": f"{YEAR - 1}-12-01", "attendance": [{"roll_no": 1, "status": "A"}],
    })
    assert res.status_code == 200
    assert db.query(DailyAttendance).count() == 4

    db.expire_all()
    yearly = db.query(YearlyAttendance).filter(YearlyAttendance.roll_no == 1).one()
    assert (yearly.present_days, yearly.absent_days, yearly.percent_present) == (3, 0, 100.0)


def test_failed_commit_rolls_back_whole_batch(admin_client, make_student, db, monkeypatch):
    make_student(1)
    make_student(2)

    def boom(self):
        raise RuntimeError("disk full")

    monkeypatch.setattr(Session, "commit", boom)
    res = admin_client.post("/attendance/save", json={"date": DAY, "attendance": [{"roll_no": 2, "status": "A"}]})

    assert res.status_code == 500
    assert res.json()["detail"] == "disk full"
    assert db.query(DailyAttendance).count() == 0
    assert db.query(YearlyAttendance).count() == 0
    assert db.query(NotificationLog).count() == 0


def test_absences_notify_each_guardian(admin_client, make_student, db):
    make_student(1, name="Aarav", contact="+91 98765 43210")
    make_student(2, name="Diya")
    make_student(3, name="Kabir", contact="+91 98765 43212")

    res = admin_client.post("/attendance/save", json={"date": DAY, "attendance": [
        {"roll_no": 1, "status": "A"}, {"roll_no": 2, "status": "A"}, {"roll_no": 3, "status": "P"},
    ]})
    outcomes = {n["roll_no"]: n for n in res.json()["notifications"]}

    assert set(outcomes) == {1, 2}
    assert outcomes[1]["status"] == "logged"
    assert outcomes[2]["status"] == "failed"
    assert outcomes[2]["message"] == "No parent contact found"
    assert outcomes[2]["provider"] is None

    logs = db.query(NotificationLog).order_by(NotificationLog.roll_no).all()
    assert [(log.roll_no, log.outcome) for log in logs] == [(1, "logged"), (2, "failed")]
    assert logs[0].content == "Your child Aarav, roll no 1, is Absent today."


def test_failed_notification_keeps_attendance(admin_client, make_student, db, monkeypatch):
    import requests
    from services import whatsapp

    def boom(*args, **kwargs):
        raise requests.ConnectionError("provider down")

    monkeypatch.setenv("GREEN_API_INSTANCE", "1101")
    monkeypatch.setenv("GREEN_API_TOKEN", "tok")
    monkeypatch.setattr(whatsapp.requests, "post", boom)
    make_student(1, contact="+91 98765 43210")

    res = admin_client.post("/attendance/save", json={"date": DAY, "attendance": [{"roll_no": 1, "status": "A"}]})
    assert res.status_code == 200
    assert res.json()["notifications"][0]["status"] == "failed"
    assert "provider down" in res.json()["notifications"][0]["message"]
    assert db.query(DailyAttendance).count() == 1


def test_entry_page_renders(admin_client):
    res = admin_client.get("/attendance/entry")
    assert res.status_code == 200
    assert "Save Attendance" in res.text
