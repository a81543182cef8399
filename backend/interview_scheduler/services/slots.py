"""
Slot derivation.

Availability is stored as raw blocks; fixed-duration bookable slots are cut
from a block on every read so HR can pick a duration per booking without the
interviewer resubmitting anything. Nothing here touches the database.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterator


@dataclass(frozen=True)
class DerivedSlot:
    block_id: int | None
    start_time: time
    end_time: time
    duration_minutes: int
    block_start: time | None = None
    block_end: time | None = None

    def as_dict(self) -> dict:
        return {
            "availability_id": self.block_id,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "duration": self.duration_minutes,
            "original_block_start": self.block_start.strftime("%H:%M") if self.block_start else None,
            "original_block_end": self.block_end.strftime("%H:%M") if self.block_end else None,
        }


@dataclass
class InterviewerDaySlots:
    """Slots offered by one interviewer on one date."""
    interviewer_id: int
    date: date
    slots: list[DerivedSlot] = field(default_factory=list)
    user_id: int | None = None
    interviewer_name: str | None = None
    interviewer_email: str | None = None
    notes: list[str] = field(default_factory=list)

    @property
    def total_slots(self) -> int:
        return len(self.slots)

    def as_dict(self) -> dict:
        return {
            "interviewer_id": self.interviewer_id,
            "user_id": self.user_id,
            "interviewer_name": self.interviewer_name,
            "interviewer_email": self.interviewer_email,
            "date": self.date.isoformat(),
            "total_slots": self.total_slots,
            "notes": self.notes,
            "slots": [s.as_dict() for s in self.slots],
        }


def _on_day(t: time) -> datetime:
    # Arithmetic happens on an arbitrary fixed day; dates never cross midnight here.
    return datetime.combine(date.min, t)


def iter_slots(start: time, end: time, duration_minutes: int) -> Iterator[tuple[time, time]]:
    """
    Yield consecutive [start, start + duration) windows that fit inside [start, end).

    The last window may end exactly at `end`; a shorter trailing remainder is dropped.
    """
    if duration_minutes < 1:
        raise ValueError("duration_minutes must be a positive integer")

    step = timedelta(minutes=int(duration_minutes))
    cursor = _on_day(start)
    block_end = _on_day(end)
    while cursor + step <= block_end:
        slot_end = cursor + step
        yield cursor.time(), slot_end.time()
        cursor = slot_end


def derive_slots(block, duration_minutes: int) -> list[DerivedSlot]:
    """Partition an availability block into fixed-duration slots. Empty if the block is too short."""
    return [
        DerivedSlot(
            block_id=getattr(block, "id", None),
            start_time=slot_start,
            end_time=slot_end,
            duration_minutes=int(duration_minutes),
            block_start=block.start_time,
            block_end=block.end_time,
        )
        for slot_start, slot_end in iter_slots(block.start_time, block.end_time, duration_minutes)
    ]


def group_slots(blocks, duration_minutes: int) -> list[InterviewerDaySlots]:
    """
    Expand blocks and group the result by (interviewer, date).

    Input order is preserved: blocks arrive ordered by date then start time, so
    groups come out in first-seen order and slots inside a group stay ordered.
    """
    groups: dict[tuple[int, date], InterviewerDaySlots] = {}
    for block in blocks:
        slots = derive_slots(block, duration_minutes)
        if not slots:
            continue
        key = (int(block.interviewer_id), block.available_date)
        group = groups.get(key)
        if group is None:
            interviewer = getattr(block, "interviewer", None)
            user = getattr(interviewer, "user", None) if interviewer is not None else None
            group = InterviewerDaySlots(
                interviewer_id=int(block.interviewer_id),
                date=block.available_date,
                user_id=getattr(user, "id", None),
                interviewer_name=getattr(user, "full_name", None),
                interviewer_email=getattr(user, "email", None),
            )
            groups[key] = group
        group.slots.extend(slots)
        if getattr(block, "notes", None):
            group.notes.append(block.notes)
    return list(groups.values())
