from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base

class ParentDetail(Base):
    __tablename__ = "parents_detail"

    id = Column(Integer, primary_key=True, index=True)
    roll_no = Column(Integer, ForeignKey("students.roll_no", ondelete="CASCADE"), nullable=False, index=True)
    parent_name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=True)
    contact = Column(String(20), nullable=False)  # WhatsApp number, e.g. +91 9876543210
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("models.students.Student", back_populates="parents")
