"""
Scheduling Facade

Caller-facing use cases composed from the availability store, slot deriver,
booking validator and session store. Each operation runs as one transaction
(validate -> persist -> commit) and then hands the result to the notification
sink. Component errors come back as a failed OperationResult; they are never
raised past this layer.
"""
import calendar
import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping, Sequence

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..config import DEFAULT_SLOT_MINUTES, MAX_SLOT_MINUTES
from ..models.availability import AvailabilityBlock
from ..models.interviewer import Interviewer
from ..models.session import InterviewSession
from ..models.user import INTERVIEWER_ROLES, User, UserStatus
from ..utils.error_handlers import (
    AppError,
    NotFoundError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.validation import (
    parse_date,
    parse_time,
    validate_integer_field,
    validate_interview_result,
    validate_session_status,
    validate_string_field,
)
from .availability_store import AvailabilityStore, BlockInput
from .booking import BookingRequest, BookingValidator
from .locks import lock_candidate_row, lock_interviewer_row, scheduling_lock
from .notifications import NotificationSink, default_sink, notify_safely
from .session_store import SessionStore
from .slots import InterviewerDaySlots, group_slots

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    success: bool
    message: str
    data: Any = None
    error_kind: str | None = None
    status_code: int = 200
    details: dict = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failed(cls, error: AppError) -> "OperationResult":
        return cls(
            success=False,
            message=error.message,
            error_kind=error.kind,
            status_code=error.status_code,
            details=dict(error.details),
        )


def _hhmm(t) -> str | None:
    return t.strftime("%H:%M") if t is not None else None


def _iso(v) -> str | None:
    return v.isoformat() if v is not None else None


def block_summary(block: AvailabilityBlock) -> dict:
    return {
        "availability_id": block.id,
        "interviewer_id": block.interviewer_id,
        "date": block.available_date.isoformat(),
        "start_time": _hhmm(block.start_time),
        "end_time": _hhmm(block.end_time),
        "slot_duration_minutes": block.slot_duration_minutes,
        "max_concurrent_interviews": block.max_concurrent_interviews,
        "notes": block.notes,
        "is_booked": bool(block.is_booked),
        "is_active": bool(block.is_active),
    }


def session_summary(s: InterviewSession) -> dict:
    cand = s.candidate
    interviewer = s.interviewer
    user = interviewer.user if interviewer is not None else None
    return {
        "session_id": s.id,
        "candidate_id": s.candidate_id,
        "candidate_name": cand.full_name if cand else None,
        "candidate_email": cand.email if cand else None,
        "candidate_mobile": cand.mobile_number if cand else None,
        "candidate_college": cand.college_name if cand else None,
        "interviewer_id": s.interviewer_id,
        "interviewer_name": user.full_name if user else None,
        "interviewer_email": user.email if user else None,
        "availability_id": s.availability_block_id,
        "scheduled_by_hr": s.scheduled_by_hr,
        "date": s.interview_date.isoformat(),
        "start_time": _hhmm(s.start_time),
        "end_time": _hhmm(s.end_time),
        "status": s.session_status.value,
        "meeting_link": s.meeting_link,
        "link_added_at": _iso(s.link_added_at),
        "interview_result": s.interview_result.value if s.interview_result else None,
        "result_updated_at": _iso(s.result_updated_at),
        "remarks": s.remarks,
        "is_active": bool(s.is_active),
        "created_at": _iso(s.created_at),
    }


def _plus_one_month(day: date) -> date:
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    # Jan 31 -> Feb 28/29
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


def _run_now(func: Callable, *args, **kwargs) -> None:
    func(*args, **kwargs)


class SchedulingService:
    """
    `dispatch` decides when notifications run: immediately by default, or e.g.
    FastAPI's `BackgroundTasks.add_task` to send them after the response.
    """

    def __init__(
        self,
        db: Session,
        *,
        notifier: NotificationSink | None = None,
        today: Callable[[], date] = date.today,
        dispatch: Callable[..., None] = _run_now,
    ):
        self.db = db
        self.notifier = notifier if notifier is not None else default_sink()
        self.dispatch = dispatch
        self.today = today
        self.availability = AvailabilityStore(db, today=today)
        self.sessions = SessionStore(db, today=today)
        self.validator = BookingValidator(db)

    # -------------------- plumbing --------------------

    def _run(self, operation: str, fn: Callable[[], OperationResult], *, lock=None) -> OperationResult:
        try:
            with lock if lock is not None else nullcontext():
                result = fn()
                self.db.commit()
                return result
        except AppError as e:
            self.db.rollback()
            logger.warning("%s refused (%s): %s", operation, e.kind, e.message)
            return OperationResult.failed(e)
        except (IntegrityError, OperationalError) as e:
            self.db.rollback()
            err = handle_database_error(e, operation)
            return OperationResult.failed(err)
        except Exception:
            self.db.rollback()
            raise

    def _notify(self, event: str, summary: dict) -> None:
        self.dispatch(notify_safely, self.notifier, event, summary)

    def _user(self, user_id: int, *, missing: type[AppError] = NotFoundError) -> User:
        user = self.db.query(User).filter(User.id == int(user_id)).first()
        if not user:
            raise missing(get_error_message("user_not_found"), details={"user_id": user_id})
        return user

    def _interviewer_for_caller(self, user_id: int) -> Interviewer:
        interviewer = self.availability.get_interviewer_for_user(user_id)
        if not interviewer:
            raise ValidationError(get_error_message("session_not_yours"))
        return interviewer

    def _owner_interviewer(self, user_id: int) -> Interviewer:
        interviewer = self.availability.get_interviewer_for_user(user_id)
        if not interviewer:
            raise NotFoundError(get_error_message("block_not_found"))
        return interviewer

    # -------------------- availability --------------------

    def _parse_submission(self, time_slots: Mapping[Any, Sequence[Any]]) -> list[tuple[date, list[BlockInput]]]:
        if not time_slots:
            raise ValidationError("At least one date with time slots is required", details={"field": "time_slots"})

        parsed: list[tuple[date, list[BlockInput]]] = []
        for raw_date, raw_blocks in time_slots.items():
            day = parse_date(raw_date, "Availability date")
            blocks: list[BlockInput] = []
            for raw in raw_blocks or []:
                if isinstance(raw, BlockInput):
                    blocks.append(raw)
                    continue
                blocks.append(
                    BlockInput(
                        start_time=parse_time(raw.get("start_time"), "Start time"),
                        end_time=parse_time(raw.get("end_time"), "End time"),
                        notes=validate_string_field(raw.get("notes"), "Notes", max_length=2000, required=False),
                    )
                )
            parsed.append((day, blocks))
        return sorted(parsed, key=lambda item: item[0])

    def submit_availability(
        self,
        user_id: int,
        time_slots: Mapping[Any, Sequence[Any]],
        slot_duration_minutes: int | None = None,
    ) -> OperationResult:
        """
        Replace the caller's blocks for every date in `time_slots`.

        The whole submission is one transaction: one bad date means no date changes.
        """
        def resolve() -> Interviewer:
            user = self._user(user_id, missing=ValidationError)
            if user.role not in INTERVIEWER_ROLES:
                raise ValidationError(get_error_message("not_an_interviewer"))
            if user.status != UserStatus.ACTIVE:
                raise ValidationError(get_error_message("user_inactive"))
            interviewer = self.availability.get_or_create_interviewer(user.id)
            if not interviewer.is_active:
                raise ValidationError(get_error_message("interviewer_inactive"))
            return interviewer

        try:
            interviewer = resolve()
            # Persist a lazily created interviewer before taking its lock.
            self.db.commit()
        except AppError as e:
            self.db.rollback()
            logger.warning("submit_availability refused (%s): %s", e.kind, e.message)
            return OperationResult.failed(e)

        interviewer_id = interviewer.id

        def op() -> OperationResult:
            submission = self._parse_submission(time_slots)
            lock_interviewer_row(self.db, interviewer_id)
            saved: list[AvailabilityBlock] = []
            for day, blocks in submission:
                saved.extend(
                    self.availability.replace_availability(
                        interviewer_id, day, blocks, slot_duration_minutes=slot_duration_minutes
                    )
                )
            return OperationResult.ok(
                f"Availability saved: {len(saved)} block(s) across {len(submission)} date(s)",
                [block_summary(b) for b in saved],
            )

        return self._run("submit_availability", op, lock=scheduling_lock(interviewer_id=interviewer_id))

    def list_my_availability(self, user_id: int) -> OperationResult:
        def op() -> OperationResult:
            self._user(user_id)
            interviewer = self.availability.get_or_create_interviewer(user_id)
            if not interviewer.is_active:
                raise ValidationError(get_error_message("interviewer_inactive"))
            blocks = self.availability.list_blocks(interviewer.id, active_only=True)
            return OperationResult.ok(f"Found {len(blocks)} availability block(s)", [block_summary(b) for b in blocks])

        return self._run("list_my_availability", op)

    def update_availability(
        self,
        block_id: int,
        user_id: int,
        *,
        start_time: Any,
        end_time: Any,
        notes: str | None = None,
    ) -> OperationResult:
        def op() -> OperationResult:
            interviewer = self._owner_interviewer(user_id)
            block = self.availability.update_block(
                block_id,
                interviewer.id,
                start_time=parse_time(start_time, "Start time"),
                end_time=parse_time(end_time, "End time"),
                notes=validate_string_field(notes, "Notes", max_length=2000, required=False),
            )
            return OperationResult.ok("Availability updated", block_summary(block))

        return self._run("update_availability", op)

    def delete_availability(self, block_id: int, user_id: int) -> OperationResult:
        def op() -> OperationResult:
            interviewer = self._owner_interviewer(user_id)
            self.availability.delete_block(block_id, interviewer.id)
            return OperationResult.ok("Availability deleted")

        return self._run("delete_availability", op)

    def list_bookable_slots(
        self,
        start_date: Any = None,
        end_date: Any = None,
        slot_duration_minutes: int | None = None,
    ) -> OperationResult:
        """
        Slots grouped per interviewer and date, as `InterviewerDaySlots`.

        Without a range the window is today through one month later.
        """
        def op() -> OperationResult:
            duration = validate_integer_field(
                slot_duration_minutes if slot_duration_minutes is not None else DEFAULT_SLOT_MINUTES,
                "Slot duration",
                min_value=1,
                max_value=MAX_SLOT_MINUTES,
            )
            start = parse_date(start_date, "Start date") if start_date is not None else self.today()
            end = parse_date(end_date, "End date") if end_date is not None else _plus_one_month(start)
            if end < start:
                raise ValidationError("End date must not be before start date")

            blocks = self.availability.find_bookable_blocks(start, end)
            groups: list[InterviewerDaySlots] = group_slots(blocks, duration)
            return OperationResult.ok(f"Found slots for {len(groups)} interviewer-day(s)", groups)

        return self._run("list_bookable_slots", op)

    # -------------------- sessions --------------------

    def schedule_interview(
        self,
        hr_user_id: int,
        *,
        candidate_id: int,
        interviewer_id: int,
        availability_id: int,
        interview_date: Any,
        start_time: Any,
        end_time: Any,
        remarks: str | None = None,
    ) -> OperationResult:
        try:
            req = BookingRequest(
                candidate_id=validate_integer_field(candidate_id, "Candidate ID", min_value=1),
                interviewer_id=validate_integer_field(interviewer_id, "Interviewer ID", min_value=1),
                availability_id=validate_integer_field(availability_id, "Availability ID", min_value=1),
                interview_date=parse_date(interview_date, "Interview date"),
                start_time=parse_time(start_time, "Start time"),
                end_time=parse_time(end_time, "End time"),
                remarks=validate_string_field(remarks, "Remarks", max_length=2000, required=False),
            )
        except AppError as e:
            logger.warning("schedule_interview refused (%s): %s", e.kind, e.message)
            return OperationResult.failed(e)

        def op() -> OperationResult:
            lock_candidate_row(self.db, req.candidate_id)
            lock_interviewer_row(self.db, req.interviewer_id)
            booking = self.validator.validate(req)
            session = self.sessions.create(booking, scheduled_by_hr=hr_user_id)
            return OperationResult.ok("Interview scheduled successfully", session_summary(session))

        result = self._run(
            "schedule_interview",
            op,
            lock=scheduling_lock(interviewer_id=req.interviewer_id, candidate_id=req.candidate_id),
        )
        if result.success:
            self._notify("session_scheduled", result.data)
        return result

    def add_meeting_link(self, session_id: int, interviewer_user_id: int, link: str) -> OperationResult:
        def op() -> OperationResult:
            interviewer = self._interviewer_for_caller(interviewer_user_id)
            s = self.sessions.add_meeting_link(session_id, interviewer.id, link)
            return OperationResult.ok("Meeting link added successfully", session_summary(s))

        return self._run("add_meeting_link", op)

    def submit_feedback(
        self,
        session_id: int,
        interviewer_user_id: int,
        result: Any,
        remarks: str | None = None,
    ) -> OperationResult:
        def op() -> OperationResult:
            outcome = validate_interview_result(result)
            interviewer = self._interviewer_for_caller(interviewer_user_id)
            s = self.sessions.submit_feedback(session_id, interviewer.id, outcome, remarks)
            return OperationResult.ok("Feedback submitted successfully", session_summary(s))

        return self._run("submit_feedback", op)

    def cancel_interview(self, session_id: int, hr_user_id: int, *, caller_is_admin: bool = False) -> OperationResult:
        def op() -> OperationResult:
            s = self.sessions.cancel(session_id, hr_user_id, caller_is_admin=caller_is_admin)
            return OperationResult.ok("Interview cancelled successfully", session_summary(s))

        result = self._run("cancel_interview", op)
        if result.success:
            self._notify("session_cancelled", result.data)
        return result

    def set_session_status(self, session_id: int, status: Any) -> OperationResult:
        def op() -> OperationResult:
            s = self.sessions.set_status(session_id, validate_session_status(status))
            return OperationResult.ok(f"Interview marked {s.session_status.value}", session_summary(s))

        return self._run("set_session_status", op)

    def get_session(self, session_id: int) -> OperationResult:
        return self._run(
            "get_session",
            lambda: OperationResult.ok("Interview session", session_summary(self.sessions.get(session_id))),
        )

    def _listing(self, operation: str, loader: Callable[[], list[InterviewSession]]) -> OperationResult:
        def op() -> OperationResult:
            rows = loader()
            return OperationResult.ok(f"Found {len(rows)} interview(s)", [session_summary(s) for s in rows])

        return self._run(operation, op)

    def list_sessions_for_candidate(self, candidate_id: int) -> OperationResult:
        return self._listing("list_sessions_for_candidate", lambda: self.sessions.list_for_candidate(candidate_id))

    def list_sessions_for_interviewer(self, interviewer_id: int) -> OperationResult:
        return self._listing("list_sessions_for_interviewer", lambda: self.sessions.list_for_interviewer(interviewer_id))

    def list_assigned_sessions(self, interviewer_user_id: int) -> OperationResult:
        def loader() -> list[InterviewSession]:
            interviewer = self.availability.get_interviewer_for_user(interviewer_user_id)
            return self.sessions.list_for_interviewer(interviewer.id) if interviewer else []

        return self._listing("list_assigned_sessions", loader)

    def list_all_scheduled(self) -> OperationResult:
        return self._listing("list_all_scheduled", self.sessions.list_all_active)

    def list_upcoming(self) -> OperationResult:
        return self._listing("list_upcoming", self.sessions.list_upcoming)
