import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import HR_ROLES
from ..utils.error_handlers import ForbiddenError, get_error_message
from ..utils.roles import hr_only, hr_or_interviewer, interviewer_only, is_admin
from .responses import respond, scheduling_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


class ScheduleInterviewIn(BaseModel):
    student_id: int = Field(..., ge=1)
    interviewer_id: int = Field(..., ge=1)
    availability_id: int = Field(..., ge=1)
    date: str = Field(..., min_length=10)
    start_time: str = Field(..., min_length=4)
    end_time: str = Field(..., min_length=4)
    remarks: str | None = None


class MeetingLinkIn(BaseModel):
    meeting_link: str | None = None


class FeedbackIn(BaseModel):
    result: str | None = None
    remarks: str | None = None


class StatusIn(BaseModel):
    status: str


@router.post("/schedule")
def schedule_interview(
    body: ScheduleInterviewIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    """
    HR books a candidate into an interviewer's availability.

    Candidate and interviewer are emailed after the response (best-effort).
    """
    result = scheduling_service(db, background_tasks).schedule_interview(
        user["sub"],
        candidate_id=body.student_id,
        interviewer_id=body.interviewer_id,
        availability_id=body.availability_id,
        interview_date=body.date,
        start_time=body.start_time,
        end_time=body.end_time,
        remarks=body.remarks,
    )
    return respond(result)


@router.put("/{session_id}/meeting-link")
def add_meeting_link(
    session_id: int,
    body: MeetingLinkIn,
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    return respond(scheduling_service(db).add_meeting_link(session_id, user["sub"], body.meeting_link))


@router.put("/{session_id}/feedback")
def submit_feedback(
    session_id: int,
    body: FeedbackIn,
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    return respond(scheduling_service(db).submit_feedback(session_id, user["sub"], body.result, body.remarks))


@router.delete("/{session_id}")
def cancel_interview(
    session_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    result = scheduling_service(db, background_tasks).cancel_interview(
        session_id, user["sub"], caller_is_admin=is_admin(user)
    )
    return respond(result)


@router.put("/{session_id}/status")
def set_status(
    session_id: int,
    body: StatusIn,
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    """Mark NO_SHOW or RESCHEDULED."""
    return respond(scheduling_service(db).set_session_status(session_id, body.status))


@router.get("/scheduled")
def all_scheduled(
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    return respond(scheduling_service(db).list_all_scheduled())


@router.get("/upcoming")
def upcoming(
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    return respond(scheduling_service(db).list_upcoming())


@router.get("/panelist/assigned")
def assigned_sessions(
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    return respond(scheduling_service(db).list_assigned_sessions(user["sub"]))


@router.get("/student/{candidate_id}")
def candidate_sessions(
    candidate_id: int,
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    return respond(scheduling_service(db).list_sessions_for_candidate(candidate_id))


@router.get("/interviewer/{interviewer_id}")
def interviewer_sessions(
    interviewer_id: int,
    db: Session = Depends(get_db),
    user=Depends(hr_or_interviewer),
):
    service = scheduling_service(db)
    if user.get("role") not in {r.value for r in HR_ROLES}:
        # Panelists may only look at their own sessions.
        own = service.availability.get_interviewer_for_user(user["sub"])
        if not own or int(own.id) != int(interviewer_id):
            raise ForbiddenError(get_error_message("forbidden"), details={"interviewer_id": interviewer_id})
    return respond(service.list_sessions_for_interviewer(interviewer_id))


@router.get("/{session_id}")
def session_details(
    session_id: int,
    db: Session = Depends(get_db),
    user=Depends(hr_or_interviewer),
):
    return respond(scheduling_service(db).get_session(session_id))
