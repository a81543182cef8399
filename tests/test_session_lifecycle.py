from datetime import date

import pytest

from backend.interview_scheduler.models import InterviewResult, InterviewSession, SessionStatus
from backend.interview_scheduler.models.session import ACTIVE_AFTER, ALLOWED_TRANSITIONS, can_transition

DAY = date(2030, 1, 20)


@pytest.fixture()
def booked(service, make_user, make_candidate):
    """One SCHEDULED session 10:00-11:00 plus the people involved."""
    hr = make_user("HR")
    panelist = make_user("INTERVIEW_PANELIST")
    candidate = make_candidate()

    saved = service.submit_availability(panelist.id, {DAY.isoformat(): [{"start_time": "09:00", "end_time": "12:00"}]})
    assert saved.success, saved.message
    block = saved.data[0]

    result = service.schedule_interview(
        hr.id,
        candidate_id=candidate.id,
        interviewer_id=block["interviewer_id"],
        availability_id=block["availability_id"],
        interview_date=DAY.isoformat(),
        start_time="10:00",
        end_time="11:00",
    )
    assert result.success, result.message
    return {"hr": hr, "panelist": panelist, "candidate": candidate, "session": result.data}


class TestTransitionTable:
    def test_terminal_states_have_no_exits(self):
        for status in (SessionStatus.COMPLETED, SessionStatus.CANCELLED, SessionStatus.NO_SHOW, SessionStatus.RESCHEDULED):
            assert ALLOWED_TRANSITIONS[status] == frozenset()

    def test_relink_is_allowed(self):
        assert can_transition(SessionStatus.LINK_ADDED, SessionStatus.LINK_ADDED)
        assert not can_transition(SessionStatus.COMPLETED, SessionStatus.LINK_ADDED)

    def test_completed_stays_active(self):
        assert ACTIVE_AFTER[SessionStatus.COMPLETED] is True
        assert ACTIVE_AFTER[SessionStatus.CANCELLED] is False


class TestMeetingLink:
    def test_link_moves_to_link_added(self, service, booked):
        sid = booked["session"]["session_id"]
        result = service.add_meeting_link(sid, booked["panelist"].id, "https://meet.example.com/abc")

        assert result.success
        assert result.data["status"] == "LINK_ADDED"
        assert result.data["meeting_link"] == "https://meet.example.com/abc"
        assert result.data["link_added_at"] is not None

    def test_relink_replaces_link(self, service, booked):
        sid = booked["session"]["session_id"]
        service.add_meeting_link(sid, booked["panelist"].id, "https://meet.example.com/one")
        result = service.add_meeting_link(sid, booked["panelist"].id, "https://meet.example.com/two")

        assert result.success
        assert result.data["status"] == "LINK_ADDED"
        assert result.data["meeting_link"] == "https://meet.example.com/two"

    def test_empty_link_is_rejected(self, service, booked):
        result = service.add_meeting_link(booked["session"]["session_id"], booked["panelist"].id, "   ")
        assert not result.success
        assert result.error_kind == "validation_error"

    def test_other_interviewer_cannot_link(self, service, booked, make_user):
        stranger = make_user("INTERVIEW_PANELIST")
        service.submit_availability(stranger.id, {DAY.isoformat(): [{"start_time": "13:00", "end_time": "14:00"}]})

        result = service.add_meeting_link(booked["session"]["session_id"], stranger.id, "https://x.example.com")
        assert not result.success
        assert result.error_kind == "validation_error"

    def test_missing_session(self, service, booked):
        result = service.add_meeting_link(999_999, booked["panelist"].id, "https://x.example.com")
        assert result.error_kind == "not_found"
        assert result.status_code == 404


class TestFeedback:
    def test_feedback_completes_session(self, service, booked):
        sid = booked["session"]["session_id"]
        result = service.submit_feedback(sid, booked["panelist"].id, "selected", "  strong fundamentals ")

        assert result.success
        assert result.data["status"] == "COMPLETED"
        assert result.data["interview_result"] == InterviewResult.SELECTED.value
        assert result.data["remarks"] == "strong fundamentals"
        assert result.data["is_active"] is True

    def test_feedback_without_link_is_allowed(self, service, booked):
        result = service.submit_feedback(booked["session"]["session_id"], booked["panelist"].id, "WAITING_LIST")
        assert result.success

    def test_unknown_result(self, service, booked):
        result = service.submit_feedback(booked["session"]["session_id"], booked["panelist"].id, "MAYBE")
        assert result.error_kind == "validation_error"

    def test_second_feedback_conflicts(self, service, booked):
        sid = booked["session"]["session_id"]
        service.submit_feedback(sid, booked["panelist"].id, "REJECTED")
        result = service.submit_feedback(sid, booked["panelist"].id, "SELECTED")
        assert result.error_kind == "conflict"

    def test_link_after_completion_conflicts(self, service, booked):
        sid = booked["session"]["session_id"]
        service.submit_feedback(sid, booked["panelist"].id, "REJECTED")
        result = service.add_meeting_link(sid, booked["panelist"].id, "https://late.example.com")
        assert result.error_kind == "conflict"


class TestCancel:
    def test_cancel_deactivates(self, service, booked, db_session):
        sid = booked["session"]["session_id"]
        result = service.cancel_interview(sid, booked["hr"].id)

        assert result.success
        assert result.data["status"] == "CANCELLED"
        assert result.data["is_active"] is False
        row = db_session.get(InterviewSession, sid)
        assert row.is_active is False

    def test_cancelled_session_rejects_link_and_feedback(self, service, booked):
        sid = booked["session"]["session_id"]
        service.cancel_interview(sid, booked["hr"].id)

        assert service.add_meeting_link(sid, booked["panelist"].id, "https://x.example.com").error_kind == "conflict"
        assert service.submit_feedback(sid, booked["panelist"].id, "SELECTED").error_kind == "conflict"

    def test_cannot_cancel_completed(self, service, booked):
        sid = booked["session"]["session_id"]
        service.submit_feedback(sid, booked["panelist"].id, "SELECTED")

        result = service.cancel_interview(sid, booked["hr"].id)
        assert result.error_kind == "validation_error"
        assert result.message == "Cannot cancel a completed interview."

    def test_cannot_cancel_twice(self, service, booked):
        sid = booked["session"]["session_id"]
        service.cancel_interview(sid, booked["hr"].id)
        assert service.cancel_interview(sid, booked["hr"].id).error_kind == "validation_error"

    def test_only_scheduler_or_admin_may_cancel(self, service, booked, make_user):
        sid = booked["session"]["session_id"]
        other_hr = make_user("HR")

        assert service.cancel_interview(sid, other_hr.id).error_kind == "validation_error"
        assert service.cancel_interview(sid, other_hr.id, caller_is_admin=True).success


class TestSetStatus:
    @pytest.mark.parametrize("status", ["NO_SHOW", "RESCHEDULED"])
    def test_marks_and_deactivates(self, service, booked, status):
        result = service.set_session_status(booked["session"]["session_id"], status)
        assert result.success
        assert result.data["status"] == status
        assert result.data["is_active"] is False

    @pytest.mark.parametrize("status", ["COMPLETED", "CANCELLED", "SCHEDULED", "BOGUS"])
    def test_rejects_other_statuses(self, service, booked, status):
        result = service.set_session_status(booked["session"]["session_id"], status)
        assert result.error_kind == "validation_error"

    def test_closed_session_conflicts(self, service, booked):
        sid = booked["session"]["session_id"]
        service.set_session_status(sid, "NO_SHOW")
        assert service.set_session_status(sid, "RESCHEDULED").error_kind == "conflict"
