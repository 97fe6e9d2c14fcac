import logging
from typing import Iterable

from sqlalchemy import func, extract
from sqlalchemy.orm import Session

from models.attendance import DailyAttendance, YearlyAttendance, PRESENT, ABSENT

logger = logging.getLogger(__name__)


def calculate_percentage(present: int, absent: int) -> float:
    total = present + absent
    if total == 0:
        return 0.0
    return round(present / total * 100, 2)


def refresh_yearly_attendance(db: Session, roll_nos: Iterable[int], year: int) -> None:
    """
    Recount present/absent days of ``year`` for the given students and upsert
    their ``yearly_attendance`` rows.

    Does not commit; the caller commits together with the daily rows so the
    aggregate never drifts from the attendance it was computed from.
    """
    roll_nos = list(roll_nos)
    if not roll_nos:
        return

    counts = db.query(
        DailyAttendance.roll_no, DailyAttendance.status, func.count(DailyAttendance.id)
    ).filter(
        DailyAttendance.roll_no.in_(roll_nos),
        extract("year", DailyAttendance.date) == year,
    ).group_by(DailyAttendance.roll_no, DailyAttendance.status).all()

    stats = {roll: {PRESENT: 0, ABSENT: 0} for roll in roll_nos}
    for roll, status, count in counts:
        if status in stats[roll]:
            stats[roll][status] = count

    existing = {
        row.roll_no: row
        for row in db.query(YearlyAttendance).filter(YearlyAttendance.roll_no.in_(roll_nos)).all()
    }

    for roll, s in stats.items():
        row = existing.get(roll)
        if row is None:
            row = YearlyAttendance(roll_no=roll)
            db.add(row)
        row.present_days = s[PRESENT]
        row.absent_days = s[ABSENT]
        row.percent_present = calculate_percentage(s[PRESENT], s[ABSENT])

    logger.debug("Yearly stats refreshed for %d students (%s)", len(stats), year)
