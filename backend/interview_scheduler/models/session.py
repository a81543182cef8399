import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class SessionStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    LINK_ADDED = "LINK_ADDED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"
    NO_SHOW = "NO_SHOW"


class InterviewResult(str, enum.Enum):
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"
    WAITING_LIST = "WAITING_LIST"


# Lifecycle: SCHEDULED -> LINK_ADDED -> COMPLETED; CANCELLED / NO_SHOW / RESCHEDULED
# reachable from either open state. LINK_ADDED -> LINK_ADDED is a re-link.
ALLOWED_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.SCHEDULED: frozenset({
        SessionStatus.LINK_ADDED,
        SessionStatus.COMPLETED,
        SessionStatus.CANCELLED,
        SessionStatus.NO_SHOW,
        SessionStatus.RESCHEDULED,
    }),
    SessionStatus.LINK_ADDED: frozenset({
        SessionStatus.LINK_ADDED,
        SessionStatus.COMPLETED,
        SessionStatus.CANCELLED,
        SessionStatus.NO_SHOW,
        SessionStatus.RESCHEDULED,
    }),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
    SessionStatus.RESCHEDULED: frozenset(),
    SessionStatus.NO_SHOW: frozenset(),
}

# Value of is_active after entering a state.
ACTIVE_AFTER: dict[SessionStatus, bool] = {
    SessionStatus.SCHEDULED: True,
    SessionStatus.LINK_ADDED: True,
    SessionStatus.COMPLETED: True,
    SessionStatus.CANCELLED: False,
    SessionStatus.RESCHEDULED: False,
    SessionStatus.NO_SHOW: False,
}

OPEN_STATUSES = frozenset({SessionStatus.SCHEDULED, SessionStatus.LINK_ADDED})
ADMIN_ASSIGNABLE_STATUSES = frozenset({SessionStatus.NO_SHOW, SessionStatus.RESCHEDULED})


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class InterviewSession(Base):
    __tablename__ = "interview_sessions"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_interview_sessions_time_order"),
        Index("ix_interview_sessions_interviewer_date", "interviewer_id", "interview_date"),
        Index("ix_interview_sessions_candidate_active", "candidate_id", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False)
    interviewer_id = Column(Integer, ForeignKey("interviewers.id"), nullable=False)
    # Nulled when the interviewer later replaces that date's availability.
    availability_block_id = Column(
        Integer,
        ForeignKey("availability_blocks.id", ondelete="SET NULL"),
        nullable=True,
    )
    scheduled_by_hr = Column(Integer, nullable=False)

    interview_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    meeting_link = Column(String(500), nullable=True)
    link_added_at = Column(DateTime(timezone=True), nullable=True)

    session_status = Column(
        Enum(SessionStatus, native_enum=False, length=16),
        nullable=False,
        default=SessionStatus.SCHEDULED,
    )
    interview_result = Column(Enum(InterviewResult, native_enum=False, length=16), nullable=True)
    result_updated_at = Column(DateTime(timezone=True), nullable=True)
    remarks = Column(Text, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    candidate = relationship("Candidate", back_populates="sessions")
    interviewer = relationship("Interviewer", back_populates="sessions")
    availability_block = relationship("AvailabilityBlock")

    def apply_status(self, target: SessionStatus) -> None:
        """Move to `target`, keeping is_active in step. Caller checks can_transition first."""
        self.session_status = target
        self.is_active = ACTIVE_AFTER[target]
