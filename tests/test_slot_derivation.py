from datetime import date, time
from types import SimpleNamespace

import pytest

from backend.interview_scheduler.services.slots import derive_slots, group_slots, iter_slots


def _block(start: time, end: time, *, block_id: int = 1, interviewer_id: int = 7, day: date = date(2030, 1, 20)):
    return SimpleNamespace(
        id=block_id,
        interviewer_id=interviewer_id,
        available_date=day,
        start_time=start,
        end_time=end,
        notes=None,
        interviewer=None,
    )


def _spans(slots):
    return [(s.start_time, s.end_time) for s in slots]


class TestDeriveSlots:
    def test_block_divides_evenly(self):
        slots = derive_slots(_block(time(9, 0), time(10, 30)), 30)
        assert _spans(slots) == [
            (time(9, 0), time(9, 30)),
            (time(9, 30), time(10, 0)),
            (time(10, 0), time(10, 30)),
        ]
        assert all(s.block_id == 1 and s.duration_minutes == 30 for s in slots)

    def test_trailing_remainder_is_dropped(self):
        slots = derive_slots(_block(time(9, 0), time(10, 20)), 30)
        assert _spans(slots) == [
            (time(9, 0), time(9, 30)),
            (time(9, 30), time(10, 0)),
        ]

    def test_duration_longer_than_block_gives_nothing(self):
        assert derive_slots(_block(time(9, 0), time(9, 45)), 60) == []

    def test_duration_equal_to_block_gives_one_slot(self):
        assert _spans(derive_slots(_block(time(14, 0), time(15, 0)), 60)) == [(time(14, 0), time(15, 0))]

    def test_changing_duration_does_not_touch_the_block(self):
        block = _block(time(9, 0), time(11, 0))
        assert len(derive_slots(block, 60)) == 2
        assert len(derive_slots(block, 20)) == 6
        assert (block.start_time, block.end_time) == (time(9, 0), time(11, 0))

    def test_slot_keeps_original_block_bounds(self):
        slot = derive_slots(_block(time(9, 0), time(10, 0)), 30)[1]
        assert slot.as_dict() == {
            "availability_id": 1,
            "start_time": "09:30",
            "end_time": "10:00",
            "duration": 30,
            "original_block_start": "09:00",
            "original_block_end": "10:00",
        }

    def test_block_near_midnight_does_not_wrap(self):
        assert _spans(derive_slots(_block(time(22, 30), time(23, 59)), 45)) == [
            (time(22, 30), time(23, 15)),
        ]

    @pytest.mark.parametrize("duration", [0, -15])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            list(iter_slots(time(9, 0), time(10, 0), duration))


class TestGroupSlots:
    def test_groups_by_interviewer_and_date_in_input_order(self):
        day1, day2 = date(2030, 1, 20), date(2030, 1, 21)
        blocks = [
            _block(time(9, 0), time(10, 0), block_id=1, interviewer_id=1, day=day1),
            _block(time(9, 0), time(9, 30), block_id=2, interviewer_id=2, day=day1),
            _block(time(13, 0), time(14, 0), block_id=3, interviewer_id=1, day=day1),
            _block(time(9, 0), time(10, 0), block_id=4, interviewer_id=1, day=day2),
        ]
        groups = group_slots(blocks, 30)

        assert [(g.interviewer_id, g.date) for g in groups] == [(1, day1), (2, day1), (1, day2)]
        first = groups[0]
        assert first.total_slots == 4
        assert [s.block_id for s in first.slots] == [1, 1, 3, 3]
        assert first.as_dict()["total_slots"] == 4

    def test_blocks_too_short_for_duration_are_skipped(self):
        groups = group_slots([_block(time(9, 0), time(9, 20))], 30)
        assert groups == []
