import logging
import os

from werkzeug.security import generate_password_hash

from database import SessionLocal, engine, Base
# All models imported so every table and relationship is registered
from models.students import Student
from models.parents import ParentDetail
from models.attendance import DailyAttendance, YearlyAttendance
from models.system import AdminProfile
from models.communication import NotificationLog

logger = logging.getLogger(__name__)

DEMO_STUDENTS = [
    {"roll_no": 1, "name": "Aarav Sharma", "class_name": "10-A", "parent": "Rakesh Sharma", "contact": "+91 98765 43210"},
    {"roll_no": 2, "name": "Diya Patel", "class_name": "10-A", "parent": "Meena Patel", "contact": "+91 98765 43211"},
    {"roll_no": 3, "name": "Kabir Singh", "class_name": "10-B", "parent": "Harpreet Singh", "contact": "+91 98765 43212"},
    {"roll_no": 4, "name": "Ananya Rao", "class_name": "10-B", "parent": "Suresh Rao", "contact": "+91 98765 43213"},
]


def seed_data(db, admin_email=None, admin_password=None):
    """Create the demo students, their guardians and (optionally) one admin. Safe to run twice."""
    added = 0
    for row in DEMO_STUDENTS:
        exists = db.query(Student).filter_by(roll_no=row["roll_no"]).first()
        if exists:
            logger.info("Exists: roll no %s", row["roll_no"])
            continue
        db.add(Student(
            roll_no=row["roll_no"],
            name=row["name"],
            class_name=row["class_name"],
            is_enrolled=False,
            identifier_code=row["roll_no"],
        ))
        db.add(ParentDetail(roll_no=row["roll_no"], parent_name=row["parent"], contact=row["contact"]))
        added += 1
        logger.info("Added: %s (roll no %s)", row["name"], row["roll_no"])
    db.commit()

    if admin_email and admin_password:
        if not db.query(AdminProfile).filter_by(email=admin_email).first():
            db.add(AdminProfile(email=admin_email, password_hash=generate_password_hash(admin_password)))
            db.commit()
            logger.info("Admin account created: %s", admin_email)

    return added


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_data(session, os.environ.get("ADMIN_EMAIL"), os.environ.get("ADMIN_PASSWORD"))
    finally:
        session.close()
