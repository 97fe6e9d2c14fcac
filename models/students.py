from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base

class Student(Base):
    __tablename__ = "students"

    # Roll number is the natural key used everywhere (parents, attendance, device)
    roll_no = Column(Integer, primary_key=True, autoincrement=False, index=True)
    name = Column(String(100), nullable=False)
    class_name = Column("class", String(20), nullable=False)

    # --- BIOMETRIC DEVICE ---
    is_enrolled = Column(Boolean, default=False, nullable=False)
    identifier_code = Column(Integer, nullable=True)  # Sent to the device instead of roll_no when set

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # --- RELATIONSHIPS (deleting a student removes everything below) ---
    parents = relationship("models.parents.ParentDetail", back_populates="student",
                           cascade="all, delete-orphan", passive_deletes=True)
    attendance = relationship("models.attendance.DailyAttendance", back_populates="student",
                              cascade="all, delete-orphan", passive_deletes=True)
    yearly = relationship("models.attendance.YearlyAttendance", back_populates="student", uselist=False,
                          cascade="all, delete-orphan", passive_deletes=True)
