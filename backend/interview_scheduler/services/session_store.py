"""
Session Store

Persists interview sessions and drives their lifecycle. Every status change
goes through models.session.ALLOWED_TRANSITIONS; nothing flips is_active or
session_status directly.

Methods flush but never commit: the caller owns the transaction.
"""
import logging
from datetime import date, datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session, joinedload

from ..models.interviewer import Interviewer
from ..models.session import (
    ADMIN_ASSIGNABLE_STATUSES,
    InterviewResult,
    InterviewSession,
    OPEN_STATUSES,
    SessionStatus,
    can_transition,
)
from ..utils.error_handlers import ConflictError, NotFoundError, ValidationError, get_error_message
from ..utils.validation import validate_string_field
from .booking import ValidatedBooking

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    def __init__(self, db: Session, *, today: Callable[[], date] = date.today):
        self.db = db
        self._today = today

    def _with_people(self, q):
        return q.options(
            joinedload(InterviewSession.candidate),
            joinedload(InterviewSession.interviewer).joinedload(Interviewer.user),
        )

    def get(self, session_id: int) -> InterviewSession:
        s = (
            self._with_people(self.db.query(InterviewSession))
            .filter(InterviewSession.id == int(session_id))
            .first()
        )
        if not s:
            raise NotFoundError(get_error_message("session_not_found"), details={"session_id": session_id})
        return s

    def _owned_open(self, session_id: int, caller_interviewer_id: int) -> InterviewSession:
        s = self.get(session_id)
        if int(s.interviewer_id) != int(caller_interviewer_id):
            raise ValidationError(get_error_message("session_not_yours"), details={"session_id": session_id})
        if not s.is_active:
            raise ConflictError(get_error_message("session_inactive"), details={"status": s.session_status.value})
        return s

    def _transition(self, s: InterviewSession, target: SessionStatus) -> None:
        if not can_transition(s.session_status, target):
            raise ConflictError(
                get_error_message("session_closed"),
                details={"status": s.session_status.value, "requested": target.value},
            )
        s.apply_status(target)

    # -------------------- lifecycle --------------------

    def create(self, booking: ValidatedBooking, *, scheduled_by_hr: int) -> InterviewSession:
        req = booking.request
        s = InterviewSession(
            candidate_id=int(req.candidate_id),
            interviewer_id=int(req.interviewer_id),
            availability_block_id=int(booking.block.id),
            scheduled_by_hr=int(scheduled_by_hr),
            interview_date=req.interview_date,
            start_time=req.start_time,
            end_time=req.end_time,
            remarks=req.remarks,
        )
        s.apply_status(SessionStatus.SCHEDULED)
        self.db.add(s)
        self.db.flush()
        logger.info(
            "Scheduled session %s: candidate %s with interviewer %s on %s %s-%s",
            s.id, s.candidate_id, s.interviewer_id, s.interview_date,
            s.start_time.strftime("%H:%M"), s.end_time.strftime("%H:%M"),
        )
        return s

    def add_meeting_link(self, session_id: int, caller_interviewer_id: int, link: str) -> InterviewSession:
        link = validate_string_field(link, "Meeting link", max_length=500)
        s = self._owned_open(session_id, caller_interviewer_id)
        self._transition(s, SessionStatus.LINK_ADDED)
        s.meeting_link = link
        s.link_added_at = _now()
        self.db.flush()
        logger.info("Meeting link set on session %s", s.id)
        return s

    def submit_feedback(
        self,
        session_id: int,
        caller_interviewer_id: int,
        result: InterviewResult,
        remarks: str | None = None,
    ) -> InterviewSession:
        s = self._owned_open(session_id, caller_interviewer_id)
        self._transition(s, SessionStatus.COMPLETED)
        s.interview_result = result
        s.result_updated_at = _now()
        if remarks is not None:
            s.remarks = remarks.strip() or None
        self.db.flush()
        logger.info("Feedback recorded on session %s: %s", s.id, result.value)
        return s

    def cancel(self, session_id: int, caller_hr_id: int, *, caller_is_admin: bool = False) -> InterviewSession:
        s = self.get(session_id)
        if not caller_is_admin and int(s.scheduled_by_hr) != int(caller_hr_id):
            raise ValidationError(
                "Only the HR user who scheduled this interview or an admin can cancel it",
                details={"session_id": s.id},
            )
        if s.session_status == SessionStatus.COMPLETED:
            raise ValidationError(get_error_message("cancel_completed"), details={"session_id": s.id})
        if not s.is_active:
            raise ValidationError(
                "Interview session is already inactive",
                details={"session_id": s.id, "status": s.session_status.value},
            )
        self._transition(s, SessionStatus.CANCELLED)
        self.db.flush()
        logger.info("Session %s cancelled by user %s", s.id, caller_hr_id)
        return s

    def set_status(self, session_id: int, status: SessionStatus) -> InterviewSession:
        """Administrative NO_SHOW / RESCHEDULED marking."""
        if status not in ADMIN_ASSIGNABLE_STATUSES:
            raise ValidationError(get_error_message("invalid_status"), details={"status": status.value})
        s = self.get(session_id)
        if not s.is_active:
            raise ConflictError(get_error_message("session_inactive"), details={"status": s.session_status.value})
        self._transition(s, status)
        self.db.flush()
        logger.info("Session %s marked %s", s.id, status.value)
        return s

    # -------------------- queries --------------------

    def list_for_candidate(self, candidate_id: int) -> list[InterviewSession]:
        return (
            self._with_people(self.db.query(InterviewSession))
            .filter(InterviewSession.candidate_id == int(candidate_id), InterviewSession.is_active.is_(True))
            .order_by(InterviewSession.interview_date.desc(), InterviewSession.start_time.desc())
            .all()
        )

    def list_for_interviewer(self, interviewer_id: int) -> list[InterviewSession]:
        return (
            self._with_people(self.db.query(InterviewSession))
            .filter(InterviewSession.interviewer_id == int(interviewer_id), InterviewSession.is_active.is_(True))
            .order_by(InterviewSession.interview_date.desc(), InterviewSession.start_time.desc())
            .all()
        )

    def list_all_active(self) -> list[InterviewSession]:
        return (
            self._with_people(self.db.query(InterviewSession))
            .filter(InterviewSession.is_active.is_(True))
            .order_by(InterviewSession.interview_date.asc(), InterviewSession.start_time.asc())
            .all()
        )

    def list_upcoming(self) -> list[InterviewSession]:
        return (
            self._with_people(self.db.query(InterviewSession))
            .filter(
                InterviewSession.is_active.is_(True),
                InterviewSession.interview_date >= self._today(),
                InterviewSession.session_status.in_(list(OPEN_STATUSES)),
            )
            .order_by(InterviewSession.interview_date.asc(), InterviewSession.start_time.asc())
            .all()
        )
