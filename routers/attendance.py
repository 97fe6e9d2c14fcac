import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session
from config import TEMPLATES_DIR
from database import get_db
from models.students import Student
from models.attendance import DailyAttendance, PRESENT, ABSENT
from services.attendance_stats import refresh_yearly_attendance
from services.whatsapp import notify_guardian
from schemas.records import AttendanceSaveResult
from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime, date as dt_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)

# --- SCHEMAS ---
class AttendanceItem(BaseModel):
    roll_no: int
    status: Literal["P", "A"]

class AttendanceSubmit(BaseModel):
    date: Optional[str] = None
    attendance: List[AttendanceItem] = []


def parse_date(value: Optional[str]) -> dt_date:
    if not value:
        return dt_date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be in YYYY-MM-DD format")


def saved_statuses(db: Session, date_obj: dt_date) -> dict:
    rows = db.query(DailyAttendance).filter(DailyAttendance.date == date_obj).all()
    return {r.roll_no: r.status for r in rows}


# 1. PAGE
@router.get("/entry")
def attendance_entry_page(request: Request):
    return templates.TemplateResponse(request, "attendance_entry.html", {"today": dt_date.today().isoformat()})


# 2. GET DATA
@router.get("/get-data")
def get_attendance_data(date: Optional[str] = None, db: Session = Depends(get_db)):
    date_obj = parse_date(date)

    students = db.query(Student).order_by(Student.roll_no).all()
    att_map = saved_statuses(db, date_obj)

    data = []
    for s in students:
        data.append({
            "roll_no": s.roll_no,
            "name": s.name,
            "class_name": s.class_name,
            "status": att_map.get(s.roll_no, PRESENT),
            "locked": s.roll_no in att_map,  # Already saved rows are read-only
        })
    return {"date": date_obj.isoformat(), "students": data}


# 3. SAVE (only rows not saved yet, then absence notifications)
@router.post("/save", response_model=AttendanceSaveResult)
def save_attendance(payload: AttendanceSubmit, db: Session = Depends(get_db)):
    date_obj = parse_date(payload.date)

    students = db.query(Student).order_by(Student.roll_no).all()
    by_roll = {s.roll_no: s for s in students}

    unknown = sorted({item.roll_no for item in payload.attendance if item.roll_no not in by_roll})
    if unknown:
        raise HTTPException(status_code=404, detail=f"Unknown roll numbers: {', '.join(map(str, unknown))}")

    submitted = {item.roll_no: item.status for item in payload.attendance}
    already_saved = saved_statuses(db, date_obj)

    new_records = []
    for s in students:
        if s.roll_no in already_saved:
            continue
        new_records.append(DailyAttendance(
            roll_no=s.roll_no,
            date=date_obj,
            status=submitted.get(s.roll_no, PRESENT),
        ))

    if not new_records:
        return {
            "status": "info",
            "message": f"All attendance already saved for {date_obj.isoformat()}",
            "saved": 0,
            "notifications": [],
        }

    try:
        db.add_all(new_records)
        db.flush()
        # Yearly row only tracks the running year
        if date_obj.year == dt_date.today().year:
            refresh_yearly_attendance(db, [r.roll_no for r in new_records], date_obj.year)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error("Attendance save failed for %s: %s", date_obj, e)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info("Attendance saved for %d students on %s", len(new_records), date_obj)

    # Har absent student ka notification alag se; ek fail ho to baaki chalte rahein
    notifications = []
    for r in new_records:
        if r.status != ABSENT:
            continue
        outcome = notify_guardian(db, by_roll[r.roll_no], r.status)
        if outcome:
            notifications.append(outcome)

    return {
        "status": "success",
        "message": f"Attendance saved for {len(new_records)} students. Yearly stats updated automatically.",
        "saved": len(new_records),
        "notifications": notifications,
    }
