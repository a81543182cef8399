"""
Booking Validator

Decides whether a proposed booking may become an interview session. Checks run
in a fixed order and the first failure wins. Everything is read from the
current persisted state; callers serialize writers with services.locks.
"""
import logging
from dataclasses import dataclass
from datetime import date, time

from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..models.availability import AvailabilityBlock
from ..models.candidate import Candidate, CandidateStatus
from ..models.interviewer import Interviewer
from ..models.session import InterviewSession, SessionStatus
from ..utils.error_handlers import ConflictError, ValidationError, get_error_message
from ..utils.validation import validate_time_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingRequest:
    candidate_id: int
    interviewer_id: int
    availability_id: int
    interview_date: date
    start_time: time
    end_time: time
    remarks: str | None = None


@dataclass
class ValidatedBooking:
    request: BookingRequest
    candidate: Candidate
    interviewer: Interviewer
    block: AvailabilityBlock


def intervals_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Half-open overlap: [a, b) and [c, d) overlap iff a < d and c < b."""
    return a_start < b_end and b_start < a_end


def candidate_has_open_session(db: Session, candidate_id: int, exclude_session_id: int | None = None) -> bool:
    q = db.query(InterviewSession.id).filter(
        InterviewSession.candidate_id == int(candidate_id),
        InterviewSession.is_active.is_(True),
        InterviewSession.session_status.notin_([SessionStatus.CANCELLED, SessionStatus.COMPLETED]),
    )
    if exclude_session_id is not None:
        q = q.filter(InterviewSession.id != int(exclude_session_id))
    return q.first() is not None


def find_overlapping_session(
    db: Session,
    interviewer_id: int,
    interview_date: date,
    start_time: time,
    end_time: time,
) -> InterviewSession | None:
    return (
        db.query(InterviewSession)
        .filter(
            InterviewSession.interviewer_id == int(interviewer_id),
            InterviewSession.interview_date == interview_date,
            InterviewSession.is_active.is_(True),
            InterviewSession.session_status != SessionStatus.CANCELLED,
            and_(InterviewSession.start_time < end_time, start_time < InterviewSession.end_time),
        )
        .order_by(InterviewSession.start_time.asc())
        .first()
    )


class BookingValidator:
    def __init__(self, db: Session):
        self.db = db

    def validate(self, req: BookingRequest) -> ValidatedBooking:
        # Structural check first: nothing else is meaningful for an inverted range.
        validate_time_range(req.start_time, req.end_time)

        # 1. candidate exists and is active
        candidate = self.db.query(Candidate).filter(Candidate.id == int(req.candidate_id)).first()
        if not candidate or candidate.status != CandidateStatus.ACTIVE:
            raise ValidationError(get_error_message("candidate_not_active"), details={"candidate_id": req.candidate_id})

        # 2. candidate has no other open session
        if candidate_has_open_session(self.db, req.candidate_id):
            raise ConflictError(
                get_error_message("candidate_already_scheduled"),
                details={"candidate_id": req.candidate_id},
            )

        # 3. interviewer exists and is active
        interviewer = self.db.query(Interviewer).filter(Interviewer.id == int(req.interviewer_id)).first()
        if not interviewer:
            raise ValidationError(get_error_message("interviewer_not_found"), details={"interviewer_id": req.interviewer_id})
        if not interviewer.is_active:
            raise ValidationError(get_error_message("interviewer_inactive"), details={"interviewer_id": req.interviewer_id})

        # 4. block exists, belongs to the interviewer, is active
        block = self.db.query(AvailabilityBlock).filter(AvailabilityBlock.id == int(req.availability_id)).first()
        if not block:
            raise ValidationError(get_error_message("block_not_found"), details={"availability_id": req.availability_id})
        if int(block.interviewer_id) != int(req.interviewer_id):
            raise ValidationError(get_error_message("block_wrong_owner"), details={"availability_id": req.availability_id})
        if not block.is_active:
            raise ValidationError(get_error_message("block_not_active"), details={"availability_id": req.availability_id})

        # 5. requested range lies inside the block on the block's date
        if (
            block.available_date != req.interview_date
            or req.start_time < block.start_time
            or req.end_time > block.end_time
        ):
            raise ValidationError(
                get_error_message("outside_availability"),
                details={
                    "block_date": block.available_date.isoformat(),
                    "block_start": block.start_time.strftime("%H:%M"),
                    "block_end": block.end_time.strftime("%H:%M"),
                },
            )

        # 6. no overlapping session for this interviewer on this date
        clash = find_overlapping_session(
            self.db, req.interviewer_id, req.interview_date, req.start_time, req.end_time
        )
        if clash is not None:
            raise ConflictError(
                get_error_message("double_booked"),
                details={
                    "session_id": clash.id,
                    "start_time": clash.start_time.strftime("%H:%M"),
                    "end_time": clash.end_time.strftime("%H:%M"),
                },
            )

        return ValidatedBooking(request=req, candidate=candidate, interviewer=interviewer, block=block)
