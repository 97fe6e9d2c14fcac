from sqlalchemy import Column, Integer, String, Date, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base

PRESENT = "P"
ABSENT = "A"

class DailyAttendance(Base):
    __tablename__ = "daily_attendance"
    # Ek student, ek din, ek hi record
    __table_args__ = (UniqueConstraint("roll_no", "date", name="uq_daily_attendance_roll_date"),)

    id = Column(Integer, primary_key=True, index=True)
    roll_no = Column(Integer, ForeignKey("students.roll_no", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    # Status: P=Present, A=Absent
    status = Column(String(1), nullable=False, default=PRESENT)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("models.students.Student", back_populates="attendance")

class YearlyAttendance(Base):
    __tablename__ = "yearly_attendance"

    roll_no = Column(Integer, ForeignKey("students.roll_no", ondelete="CASCADE"), primary_key=True)
    present_days = Column(Integer, default=0)
    absent_days = Column(Integer, default=0)
    percent_present = Column(Float, default=0.0)

    student = relationship("models.students.Student", back_populates="yearly")
