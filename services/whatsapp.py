import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import requests
from sqlalchemy.orm import Session

from config import messaging_credentials
from models.attendance import ABSENT
from models.communication import NotificationLog
from models.parents import ParentDetail
from models.students import Student

logger = logging.getLogger(__name__)

SENT = "sent"
LOGGED = "logged"
FAILED = "failed"

GREEN_API_URL = "https://api.green-api.com/waInstance{instance}/sendMessage/{token}"
ULTRAMSG_URL = "https://api.ultramsg.com/{instance}/messages/chat"
REQUEST_TIMEOUT = 10  # seconds


@dataclass
class DispatchResult:
    outcome: str
    message: str
    provider: Optional[str] = None
    details: dict = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.outcome != FAILED


def clean_phone(contact: str) -> str:
    return re.sub(r"[\s\-\(\)]", "", contact)


def absence_message(student_name: str, roll_no) -> str:
    return f"Your child {student_name}, roll no {roll_no}, is Absent today."


# --- PROVIDERS ---

def _send_green_api(instance: str, token: str, phone: str, message: str) -> dict:
    response = requests.post(
        GREEN_API_URL.format(instance=instance, token=token),
        json={"chatId": f"{phone}@c.us", "message": message},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def _send_ultramsg(instance: str, token: str, phone: str, message: str) -> dict:
    response = requests.post(
        ULTRAMSG_URL.format(instance=instance),
        data={"token": token, "to": phone, "body": message},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def _configured_providers():
    creds = messaging_credentials()
    providers = []
    # Green API first, UltraMSG as fallback
    if creds["green_api_instance"] and creds["green_api_token"]:
        providers.append(("green-api", _send_green_api, creds["green_api_instance"], creds["green_api_token"]))
    if creds["ultramsg_instance"] and creds["ultramsg_token"]:
        providers.append(("ultramsg", _send_ultramsg, creds["ultramsg_instance"], creds["ultramsg_token"]))
    return providers


def send_whatsapp(student_name: str, roll_no, contact: str) -> DispatchResult:
    """
    Send the absence message through the first provider that answers.

    With no provider configured the message is only written to the server log
    and the result is ``logged``; that still counts as success for the caller.
    """
    phone = clean_phone(contact)
    message = absence_message(student_name, roll_no)

    providers = _configured_providers()
    if not providers:
        logger.info("WhatsApp notification would be sent to %s: %s", contact, message)
        return DispatchResult(
            outcome=LOGGED,
            message="WhatsApp API not configured. Message logged.",
            details={
                "to": contact,
                "content": message,
                "note": "Configure GREEN_API or ULTRAMSG secrets to enable actual WhatsApp messaging",
            },
        )

    errors = []
    for name, send, instance, token in providers:
        try:
            api_response = send(instance, token, phone, message)
        except (requests.RequestException, ValueError) as e:
            logger.error("%s error for roll no %s: %s", name, roll_no, e)
            errors.append(f"{name}: {e}")
            continue
        logger.info("%s response for roll no %s: %s", name, roll_no, api_response)
        return DispatchResult(
            outcome=SENT,
            message=f"WhatsApp notification sent via {name}",
            provider=name,
            details={"response": api_response},
        )

    return DispatchResult(outcome=FAILED, message="; ".join(errors))


def log_dispatch(db: Session, roll_no, contact, result: DispatchResult, content: str) -> None:
    db.add(NotificationLog(
        roll_no=roll_no,
        contact=contact,
        content=content,
        provider=result.provider,
        outcome=result.outcome,
        detail=None if result.outcome == SENT else result.message,
    ))
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error("Could not write notification log for roll no %s: %s", roll_no, e)


def notify_guardian(db: Session, student: Student, status: str) -> Optional[dict]:
    """Tell the guardian of ``student`` about an absence; returns the per-student outcome."""
    if status != ABSENT:
        return None

    parent = db.query(ParentDetail).filter(ParentDetail.roll_no == student.roll_no)\
        .order_by(ParentDetail.id).first()
    content = absence_message(student.name, student.roll_no)

    if not parent or not parent.contact:
        result = DispatchResult(outcome=FAILED, message="No parent contact found")
        log_dispatch(db, student.roll_no, None, result, content)
        return {"roll_no": student.roll_no, "status": FAILED, "message": result.message, "provider": None}

    try:
        result = send_whatsapp(student.name, student.roll_no, parent.contact)
    except Exception as e:
        logger.exception("Notification for roll no %s crashed", student.roll_no)
        result = DispatchResult(outcome=FAILED, message=str(e) or "Failed to send notification")

    log_dispatch(db, student.roll_no, parent.contact, result, content)
    return {
        "roll_no": student.roll_no,
        "status": result.outcome,
        "message": result.message,
        "provider": result.provider,
    }
