from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class AvailabilityBlock(Base):
    """
    A contiguous span an interviewer declared reachable on one date.

    Blocks are stored as submitted; bookable slots are derived on read
    (see services.slots), so `slot_duration_minutes` is only the default.
    """

    __tablename__ = "availability_blocks"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_availability_blocks_time_order"),
        CheckConstraint("slot_duration_minutes >= 1", name="ck_availability_blocks_duration"),
        CheckConstraint("max_concurrent_interviews >= 1", name="ck_availability_blocks_concurrency"),
        Index("ix_availability_blocks_interviewer_date", "interviewer_id", "available_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    interviewer_id = Column(Integer, ForeignKey("interviewers.id"), nullable=False)
    available_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_duration_minutes = Column(Integer, nullable=False, default=60)
    max_concurrent_interviews = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)
    is_booked = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    interviewer = relationship("Interviewer", back_populates="blocks")
