from fastapi import APIRouter, Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, cast, String
from config import TEMPLATES_DIR
from database import get_db
from models.students import Student
from models.attendance import DailyAttendance, YearlyAttendance
from schemas.records import YearlySchema, HistoryItem
from typing import List, Optional

router = APIRouter(tags=["Yearly Attendance"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)


@router.get("/yearly-attendance")
def yearly_attendance_page(request: Request, roll_no: Optional[int] = None):
    return templates.TemplateResponse(request, "yearly_attendance.html", {"roll_no": roll_no})


@router.get("/api/v1/yearly-attendance", response_model=List[YearlySchema])
def list_yearly(roll_no: Optional[int] = None, search: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(YearlyAttendance).join(Student).options(joinedload(YearlyAttendance.student))

    if roll_no is not None:
        query = query.filter(YearlyAttendance.roll_no == roll_no)

    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                cast(YearlyAttendance.roll_no, String).like(search_fmt),
                Student.name.ilike(search_fmt),
                Student.class_name.ilike(search_fmt),
            )
        )

    return [
        YearlySchema(
            roll_no=r.roll_no,
            present_days=r.present_days or 0,
            absent_days=r.absent_days or 0,
            percent_present=r.percent_present or 0.0,
            student_name=r.student.name if r.student else None,
            student_class=r.student.class_name if r.student else None,
        )
        for r in query.order_by(YearlyAttendance.roll_no).all()
    ]


@router.get("/api/v1/yearly-attendance/{roll_no}/history", response_model=List[HistoryItem])
def attendance_history(roll_no: int, db: Session = Depends(get_db)):
    return db.query(DailyAttendance).filter(DailyAttendance.roll_no == roll_no)\
        .order_by(DailyAttendance.date.asc()).all()
