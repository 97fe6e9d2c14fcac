import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from database import get_db
from models.communication import NotificationLog
from services.whatsapp import send_whatsapp, log_dispatch, absence_message, FAILED

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Communication"])


# --- 1. SEND-WHATSAPP FUNCTION (called per absent student) ---
@router.post("/functions/send-whatsapp")
async def send_whatsapp_function(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return JSONResponse({"error": "Missing required fields"}, status_code=400)

    student_name = body.get("studentName")
    roll_no = body.get("rollNo")
    contact = body.get("contact")
    if not student_name or not roll_no or not contact:
        return JSONResponse({"error": "Missing required fields"}, status_code=400)

    try:
        result = send_whatsapp(str(student_name), roll_no, str(contact))
    except Exception as e:
        logger.exception("Error sending WhatsApp")
        return JSONResponse(
            {"error": "Failed to send WhatsApp notification", "details": str(e)},
            status_code=500,
        )

    log_dispatch(db, roll_no if isinstance(roll_no, int) else None, str(contact), result,
                 absence_message(student_name, roll_no))

    if result.outcome == FAILED:
        return JSONResponse(
            {"error": "Failed to send WhatsApp notification", "details": result.message},
            status_code=500,
        )

    response = {"success": True, "message": result.message}
    if result.details:
        response["details"] = result.details
    return response


@router.api_route("/functions/send-whatsapp", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def send_whatsapp_wrong_method():
    return JSONResponse({"error": "Method not allowed"}, status_code=405)


# --- 2. HISTORY API ---
@router.get("/api/v1/notifications/history")
def get_history(limit: int = 100, db: Session = Depends(get_db)):
    return db.query(NotificationLog).order_by(NotificationLog.id.desc()).limit(limit).all()
