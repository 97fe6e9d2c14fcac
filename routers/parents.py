from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, cast, String
from database import get_db
from models.parents import ParentDetail
from models.students import Student
from schemas.records import ParentSchema
from pydantic import BaseModel
from typing import List, Optional

router = APIRouter(prefix="/api/v1/parents", tags=["Parents"])

# --- SCHEMAS ---
class ParentPayload(BaseModel):
    roll_no: int
    parent_name: str
    contact: str
    address: Optional[str] = None


def _clean_payload(item: ParentPayload, db: Session) -> dict:
    parent_name = item.parent_name.strip()
    contact = item.contact.strip()
    address = (item.address or "").strip() or None

    if not parent_name or not contact:
        raise HTTPException(status_code=400, detail="Please fill all required fields")
    if len(parent_name) > 100 or len(contact) > 20 or (address and len(address) > 255):
        raise HTTPException(status_code=400, detail="Field too long")

    if not db.query(Student).filter(Student.roll_no == item.roll_no).first():
        raise HTTPException(status_code=404, detail="Student not found")

    return {"roll_no": item.roll_no, "parent_name": parent_name, "contact": contact, "address": address}


def _to_schema(p: ParentDetail) -> ParentSchema:
    return ParentSchema(
        id=p.id,
        roll_no=p.roll_no,
        parent_name=p.parent_name,
        address=p.address,
        contact=p.contact,
        student_name=p.student.name if p.student else None,
    )


@router.get("", response_model=List[ParentSchema])
def list_parents(roll_no: Optional[int] = None, search: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(ParentDetail).join(Student).options(joinedload(ParentDetail.student))

    if roll_no is not None:
        query = query.filter(ParentDetail.roll_no == roll_no)

    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                ParentDetail.parent_name.ilike(search_fmt),
                ParentDetail.contact.like(search_fmt),
                cast(ParentDetail.roll_no, String).like(search_fmt),
                Student.name.ilike(search_fmt),
            )
        )

    return [_to_schema(p) for p in query.order_by(ParentDetail.roll_no, ParentDetail.id).all()]


@router.post("")
def add_parent(item: ParentPayload, db: Session = Depends(get_db)):
    new_parent = ParentDetail(**_clean_payload(item, db))
    try:
        db.add(new_parent)
        db.commit()
        db.refresh(new_parent)
        return {"message": "Parent details added", "id": new_parent.id}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{id}")
def update_parent(id: int, item: ParentPayload, db: Session = Depends(get_db)):
    parent = db.query(ParentDetail).filter(ParentDetail.id == id).first()
    if not parent:
        raise HTTPException(status_code=404, detail="Parent details not found")

    for key, value in _clean_payload(item, db).items():
        setattr(parent, key, value)
    try:
        db.commit()
        return {"message": "Parent details updated"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{id}")
def delete_parent(id: int, db: Session = Depends(get_db)):
    parent = db.query(ParentDetail).filter(ParentDetail.id == id).first()
    if not parent:
        raise HTTPException(status_code=404, detail="Parent details not found")
    db.delete(parent)
    db.commit()
    return {"message": "Parent details deleted"}
