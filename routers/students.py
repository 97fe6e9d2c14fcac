from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import or_, cast, String
from database import get_db
from models.students import Student
from schemas.records import StudentSchema
from pydantic import BaseModel
from typing import List, Optional

router = APIRouter(prefix="/api/v1/students", tags=["Students"])

# --- SCHEMAS ---
class StudentCreate(BaseModel):
    roll_no: int
    name: str
    class_name: str

class StudentUpdate(BaseModel):
    name: str
    class_name: str


def _clean_fields(name: str, class_name: str):
    name, class_name = name.strip(), class_name.strip()
    if not name or not class_name:
        raise HTTPException(status_code=400, detail="Please fill all fields")
    if len(name) > 100:
        raise HTTPException(status_code=400, detail="Name must be at most 100 characters")
    if len(class_name) > 20:
        raise HTTPException(status_code=400, detail="Class must be at most 20 characters")
    return name, class_name


def get_student_or_404(db: Session, roll_no: int) -> Student:
    student = db.query(Student).filter(Student.roll_no == roll_no).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


# ===============================
#   STUDENT CRUD OPERATIONS
# ===============================

@router.get("", response_model=List[StudentSchema])
def list_students(search: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(Student)
    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Student.name.ilike(search_fmt),
                Student.class_name.ilike(search_fmt),
                cast(Student.roll_no, String).like(search_fmt),
            )
        )
    return query.order_by(Student.roll_no).all()


@router.post("")
def add_student(item: StudentCreate, db: Session = Depends(get_db)):
    if item.roll_no <= 0:
        raise HTTPException(status_code=400, detail="Please enter a valid roll number")
    name, class_name = _clean_fields(item.name, item.class_name)

    existing = db.query(Student).filter(Student.roll_no == item.roll_no).first()
    if existing:
        raise HTTPException(status_code=400, detail="Student with this roll number already exists")

    new_student = Student(
        roll_no=item.roll_no,
        name=name,
        class_name=class_name,
        is_enrolled=False,
        identifier_code=item.roll_no,
    )
    try:
        db.add(new_student)
        db.commit()
        db.refresh(new_student)
        return {"message": "Student added successfully", "roll_no": new_student.roll_no}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{roll_no}", response_model=StudentSchema)
def get_student_detail(roll_no: int, db: Session = Depends(get_db)):
    return get_student_or_404(db, roll_no)


@router.put("/{roll_no}")
def update_student(roll_no: int, item: StudentUpdate, db: Session = Depends(get_db)):
    student = get_student_or_404(db, roll_no)
    student.name, student.class_name = _clean_fields(item.name, item.class_name)
    try:
        db.commit()
        return {"message": "Student updated successfully"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# Parent details, attendance and yearly stats go with the student
@router.delete("/{roll_no}")
def delete_student(roll_no: int, db: Session = Depends(get_db)):
    student = get_student_or_404(db, roll_no)
    try:
        db.delete(student)
        db.commit()
        return {"message": "Student and all related data deleted"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# Device will offer this student again on its next poll
@router.post("/{roll_no}/re-enroll")
def reset_enrollment(roll_no: int, db: Session = Depends(get_db)):
    student = get_student_or_404(db, roll_no)
    student.is_enrolled = False
    db.commit()
    return {"message": f"{student.name} queued for biometric enrollment", "roll_no": roll_no}
