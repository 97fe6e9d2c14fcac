from pydantic import BaseModel
from datetime import date
from typing import List, Optional

# Response models shared by the routers and the page layer

class StudentSchema(BaseModel):
    roll_no: int
    name: str
    class_name: str
    is_enrolled: bool
    identifier_code: Optional[int] = None

    class Config:
        from_attributes = True

class ParentSchema(BaseModel):
    id: int
    roll_no: int
    parent_name: str
    address: Optional[str] = None
    contact: str
    student_name: Optional[str] = None

class YearlySchema(BaseModel):
    roll_no: int
    present_days: int
    absent_days: int
    percent_present: float
    student_name: Optional[str] = None
    student_class: Optional[str] = None

class HistoryItem(BaseModel):
    date: date
    status: str

    class Config:
        from_attributes = True

class NotificationOutcome(BaseModel):
    roll_no: int
    status: str  # sent / logged / failed
    message: str
    provider: Optional[str] = None

class AttendanceSaveResult(BaseModel):
    status: str  # success / info
    message: str
    saved: int
    notifications: List[NotificationOutcome] = []
