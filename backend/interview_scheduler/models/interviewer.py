from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Interviewer(Base):
    __tablename__ = "interviewers"

    id = Column(Integer, primary_key=True, index=True)
    # One interviewer per owning user; created lazily on first availability submission.
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    max_interviews_per_day = Column(Integer, nullable=False, default=5)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    blocks = relationship("AvailabilityBlock", back_populates="interviewer")
    sessions = relationship("InterviewSession", back_populates="interviewer")
