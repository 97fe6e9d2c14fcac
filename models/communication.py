from sqlalchemy import Column, Integer, String, DateTime, Text
from database import Base
from datetime import datetime

class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)
    roll_no = Column(Integer, nullable=True, index=True)  # No FK: log survives student delete
    contact = Column(String(20), nullable=True)
    content = Column(Text, nullable=False)  # Pura message jo bheja gaya
    provider = Column(String(20), nullable=True)  # "green-api", "ultramsg" or None
    outcome = Column(String(10), nullable=False)  # "sent", "logged", "failed"
    detail = Column(Text, nullable=True)
    sent_at = Column(DateTime, default=datetime.now)
