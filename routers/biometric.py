"""
Pull protocol for the fingerprint device.

The device polls ``/functions/biometric-check``: ``SCAN`` keeps it in normal
scan mode, ``ENROLL`` switches it to capture the given id. After capture it
reports back on ``/functions/biometric-confirm``. A failed capture leaves the
student unenrolled, so the next poll hands out the same student again.
"""
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from database import get_db
from models.students import Student

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["Biometric Device"])


def _error(message: str, status_code: int, **extra):
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def parse_roll_no(value):
    """Accept an int or a digit string; bool and float are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


# 1. POLL (device -> server)
@router.get("/biometric-check")
def biometric_check(db: Session = Depends(get_db)):
    try:
        student = db.query(Student).filter(Student.is_enrolled == False)\
            .order_by(Student.created_at.asc(), Student.roll_no.asc()).first()
    except Exception:
        logger.exception("Error in biometric-check")
        return _error("Internal server error", 500)

    if not student:
        logger.info("No pending enrollments, returning SCAN command")
        return {"command": "SCAN"}

    logger.info("Pending enrollment found for roll_no: %s", student.roll_no)
    return {
        "command": "ENROLL",
        "id": student.identifier_code or student.roll_no,
        "roll_no": student.roll_no,
    }


# 2. CONFIRM (device -> server)
@router.post("/biometric-confirm")
async def biometric_confirm(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
    except ValueError:
        return _error("Invalid JSON body", 400)
    if not isinstance(body, dict):
        return _error("roll_no is required", 400)

    roll_no = body.get("roll_no")
    status = body.get("status")
    message = body.get("message")
    logger.info("Received confirmation for roll_no: %s, status: %s, message: %s", roll_no, status, message)

    if not roll_no:
        return _error("roll_no is required", 400)

    if status != "success":
        # Flag stays false, student comes back on the next poll
        logger.info("Enrollment failed for roll_no %s: %s", roll_no, message)
        return {"success": False, "message": f"Enrollment failed: {message}"}

    roll_no = parse_roll_no(roll_no)
    if roll_no is None:
        return _error("roll_no must be a number", 400)

    try:
        student = db.query(Student).filter(Student.roll_no == roll_no).first()
    except Exception:
        logger.exception("Error in biometric-confirm")
        return _error("Internal server error", 500)

    if not student:
        return _error("Student not found", 404)

    try:
        student.is_enrolled = True
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error("Error updating student %s: %s", roll_no, e)
        return _error("Failed to update student", 500, details=str(e))

    logger.info("Successfully marked roll_no %s as enrolled", roll_no)
    return {"success": True, "message": f"Student {roll_no} enrolled successfully"}


@router.api_route("/biometric-check", methods=["POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
@router.api_route("/biometric-confirm", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def method_not_allowed():
    return JSONResponse({"error": "Method not allowed"}, status_code=405)
