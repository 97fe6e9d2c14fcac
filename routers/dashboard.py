import calendar
from fastapi import APIRouter, Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session
from sqlalchemy import func, extract
from config import TEMPLATES_DIR
from database import get_db
from models.students import Student
from models.attendance import DailyAttendance, YearlyAttendance, PRESENT, ABSENT
from datetime import date

router = APIRouter(tags=["Dashboard"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def collect_stats(db: Session, today: date) -> dict:
    # 1. Basic Counts
    total_students = db.query(Student).count()

    # 2. Today's attendance
    att_counts = db.query(
        DailyAttendance.status, func.count(DailyAttendance.id)
    ).filter(DailyAttendance.date == today).group_by(DailyAttendance.status).all()
    stats_map = {status: count for status, count in att_counts}
    present = stats_map.get(PRESENT, 0)
    absent = stats_map.get(ABSENT, 0)

    # 3. Overall percentage (average of yearly rows)
    avg = db.query(func.avg(YearlyAttendance.percent_present)).scalar()
    overall = round(float(avg), 1) if avg is not None else 0.0

    # 4. Monthly chart, January se current month tak
    month_rows = db.query(
        extract("month", DailyAttendance.date), DailyAttendance.status, func.count(DailyAttendance.id)
    ).filter(
        extract("year", DailyAttendance.date) == today.year
    ).group_by(extract("month", DailyAttendance.date), DailyAttendance.status).all()

    month_map = {}
    for month_num, status, count in month_rows:
        month_map.setdefault(int(month_num), {})[status] = count

    monthly = []
    for m in range(1, today.month + 1):
        monthly.append({
            "month": calendar.month_abbr[m],
            "present": month_map.get(m, {}).get(PRESENT, 0),
            "absent": month_map.get(m, {}).get(ABSENT, 0),
        })

    return {
        "total_students": total_students,
        "today_present": present,
        "today_absent": absent,
        "unmarked": max(total_students - present - absent, 0),
        "overall_percentage": overall,
        "monthly": monthly,
    }


@router.get("/")
def dashboard_view(request: Request, db: Session = Depends(get_db)):
    stats = collect_stats(db, date.today())
    return templates.TemplateResponse(request, "dashboard.html", {"stats": stats})


@router.get("/api/v1/dashboard/stats")
def dashboard_stats(db: Session = Depends(get_db)):
    return collect_stats(db, date.today())
