from datetime import date, time

import pytest

from backend.interview_scheduler.models import AvailabilityBlock, InterviewSession, SessionStatus
from backend.interview_scheduler.services.availability_store import AvailabilityStore, BlockInput
from backend.interview_scheduler.utils.error_handlers import ConflictError, NotFoundError, ValidationError, get_error_message

TODAY = date(2030, 1, 1)
DAY = date(2030, 1, 20)


@pytest.fixture()
def store(db_session):
    return AvailabilityStore(db_session, today=lambda: TODAY)


@pytest.fixture()
def interviewer(store, make_user, db_session):
    user = make_user("INTERVIEW_PANELIST")
    it = store.get_or_create_interviewer(user.id)
    db_session.commit()
    return it


def _spans(blocks):
    return [(b.start_time, b.end_time) for b in blocks]


def test_get_or_create_interviewer_is_lazy_and_unique(store, make_user, db_session):
    user = make_user("FACULTY")
    assert store.get_interviewer_for_user(user.id) is None

    first = store.get_or_create_interviewer(user.id)
    db_session.commit()
    again = store.get_or_create_interviewer(user.id)

    assert first.id == again.id
    assert first.max_interviews_per_day == 5
    assert first.is_active is True


def test_replace_is_total(store, interviewer, db_session):
    store.replace_availability(interviewer.id, DAY, [
        BlockInput(time(9, 0), time(12, 0)),
        BlockInput(time(14, 0), time(16, 0)),
    ])
    db_session.commit()

    store.replace_availability(interviewer.id, DAY, [BlockInput(time(10, 0), time(11, 0), notes="short day")])
    db_session.commit()

    blocks = store.list_blocks(interviewer.id)
    assert _spans(blocks) == [(time(10, 0), time(11, 0))]
    assert blocks[0].notes == "short day"
    assert blocks[0].slot_duration_minutes == 60
    assert blocks[0].is_booked is False


def test_replace_only_touches_the_given_date(store, interviewer, db_session):
    other_day = date(2030, 1, 21)
    store.replace_availability(interviewer.id, DAY, [BlockInput(time(9, 0), time(10, 0))])
    store.replace_availability(interviewer.id, other_day, [BlockInput(time(9, 0), time(10, 0))])
    db_session.commit()

    store.replace_availability(interviewer.id, DAY, [])
    db_session.commit()

    assert [b.available_date for b in store.list_blocks(interviewer.id)] == [other_day]


def test_replace_rejects_past_date(store, interviewer):
    with pytest.raises(ValidationError) as exc:
        store.replace_availability(interviewer.id, date(2029, 12, 31), [BlockInput(time(9, 0), time(10, 0))])
    assert exc.value.message == get_error_message("past_date")
    assert exc.value.details == {"date": "2029-12-31"}


def test_today_is_not_in_the_past(store, interviewer, db_session):
    saved = store.replace_availability(interviewer.id, TODAY, [BlockInput(time(9, 0), time(10, 0))])
    assert len(saved) == 1


def test_one_invalid_block_keeps_previous_blocks(store, interviewer, db_session):
    store.replace_availability(interviewer.id, DAY, [BlockInput(time(9, 0), time(10, 0))])
    db_session.commit()

    with pytest.raises(ValidationError):
        store.replace_availability(interviewer.id, DAY, [
            BlockInput(time(11, 0), time(12, 0)),
            BlockInput(time(15, 0), time(15, 0)),
        ])
    db_session.rollback()

    assert _spans(store.list_blocks(interviewer.id)) == [(time(9, 0), time(10, 0))]


def test_custom_default_slot_duration_is_stored(store, interviewer):
    saved = store.replace_availability(
        interviewer.id, DAY, [BlockInput(time(9, 0), time(10, 0))], slot_duration_minutes=45
    )
    assert saved[0].slot_duration_minutes == 45


def test_list_blocks_is_ordered_by_date_then_start(store, interviewer, db_session):
    store.replace_availability(interviewer.id, date(2030, 1, 22), [BlockInput(time(8, 0), time(9, 0))])
    store.replace_availability(interviewer.id, DAY, [
        BlockInput(time(15, 0), time(16, 0)),
        BlockInput(time(9, 0), time(10, 0)),
    ])
    db_session.commit()

    blocks = store.list_blocks(interviewer.id)
    assert [(b.available_date, b.start_time) for b in blocks] == [
        (DAY, time(9, 0)),
        (DAY, time(15, 0)),
        (date(2030, 1, 22), time(8, 0)),
    ]


def test_delete_block_checks_owner_and_booking(store, interviewer, make_user, db_session):
    block = store.replace_availability(interviewer.id, DAY, [BlockInput(time(9, 0), time(10, 0))])[0]
    db_session.commit()

    other = store.get_or_create_interviewer(make_user("INTERVIEW_PANELIST").id)
    db_session.commit()
    with pytest.raises(NotFoundError):
        store.delete_block(block.id, other.id)
    with pytest.raises(NotFoundError):
        store.delete_block(999_999, interviewer.id)

    block.is_booked = True
    db_session.commit()
    with pytest.raises(ConflictError):
        store.delete_block(block.id, interviewer.id)

    block.is_booked = False
    db_session.commit()
    store.delete_block(block.id, interviewer.id)
    db_session.commit()
    assert store.list_blocks(interviewer.id) == []


def test_block_with_active_session_cannot_be_edited(store, interviewer, make_candidate, db_session):
    block = store.replace_availability(interviewer.id, DAY, [BlockInput(time(9, 0), time(12, 0))])[0]
    cand = make_candidate()
    db_session.add(InterviewSession(
        candidate_id=cand.id,
        interviewer_id=interviewer.id,
        availability_block_id=block.id,
        scheduled_by_hr=1,
        interview_date=DAY,
        start_time=time(9, 0),
        end_time=time(10, 0),
        session_status=SessionStatus.SCHEDULED,
        is_active=True,
    ))
    db_session.commit()

    with pytest.raises(ConflictError):
        store.update_block(block.id, interviewer.id, start_time=time(10, 0), end_time=time(11, 0))
    with pytest.raises(ConflictError):
        store.delete_block(block.id, interviewer.id)


def test_update_block_edits_in_place(store, interviewer, db_session):
    block = store.replace_availability(interviewer.id, DAY, [BlockInput(time(9, 0), time(10, 0))])[0]
    db_session.commit()

    updated = store.update_block(block.id, interviewer.id, start_time=time(9, 30), end_time=time(11, 0), notes="moved")
    db_session.commit()

    assert updated.id == block.id
    assert (updated.start_time, updated.end_time, updated.notes) == (time(9, 30), time(11, 0), "moved")

    with pytest.raises(ValidationError):
        store.update_block(block.id, interviewer.id, start_time=time(11, 0), end_time=time(10, 0))


def test_find_bookable_blocks_filters_and_orders(store, interviewer, make_user, db_session):
    store.replace_availability(interviewer.id, date(2030, 1, 25), [BlockInput(time(9, 0), time(10, 0))])
    store.replace_availability(interviewer.id, DAY, [
        BlockInput(time(13, 0), time(14, 0)),
        BlockInput(time(9, 0), time(10, 0)),
    ])
    db_session.commit()

    booked = store.list_blocks(interviewer.id)[0]
    booked.is_booked = True

    inactive = store.get_or_create_interviewer(make_user("FACULTY").id)
    store.replace_availability(inactive.id, DAY, [BlockInput(time(9, 0), time(10, 0))])
    inactive.is_active = False
    db_session.commit()

    everything = store.find_bookable_blocks()
    assert [(b.available_date, b.start_time) for b in everything] == [
        (DAY, time(13, 0)),
        (date(2030, 1, 25), time(9, 0)),
    ]

    ranged = store.find_bookable_blocks(date(2030, 1, 21), date(2030, 1, 31))
    assert [b.available_date for b in ranged] == [date(2030, 1, 25)]
    assert all(isinstance(b, AvailabilityBlock) for b in ranged)


def test_replace_detaches_sessions_from_removed_blocks(store, interviewer, make_candidate, db_session):
    block = store.replace_availability(interviewer.id, DAY, [BlockInput(time(9, 0), time(12, 0))])[0]
    session = InterviewSession(
        candidate_id=make_candidate().id,
        interviewer_id=interviewer.id,
        availability_block_id=block.id,
        scheduled_by_hr=1,
        interview_date=DAY,
        start_time=time(9, 0),
        end_time=time(10, 0),
    )
    session.apply_status(SessionStatus.SCHEDULED)
    db_session.add(session)
    db_session.commit()

    store.replace_availability(interviewer.id, DAY, [BlockInput(time(13, 0), time(15, 0))])
    db_session.commit()
    db_session.refresh(session)

    assert session.availability_block_id is None
    assert session.is_active is True
    assert (session.start_time, session.end_time) == (time(9, 0), time(10, 0))
