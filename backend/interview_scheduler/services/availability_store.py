"""
Availability Store

Authoritative storage for interviewer availability blocks. Resubmitting a date
replaces that date's blocks wholesale; single blocks can be edited or deleted
by their owner while nothing is booked against them.

Methods flush but never commit: the caller owns the transaction.
"""
import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Callable, Iterable

from sqlalchemy.orm import Session, joinedload

from ..config import DEFAULT_MAX_INTERVIEWS_PER_DAY, DEFAULT_SLOT_MINUTES
from ..models.availability import AvailabilityBlock
from ..models.interviewer import Interviewer
from ..models.session import InterviewSession
from ..utils.error_handlers import ConflictError, NotFoundError, ValidationError, get_error_message
from ..utils.validation import validate_integer_field, validate_time_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockInput:
    start_time: time
    end_time: time
    notes: str | None = None


class AvailabilityStore:
    def __init__(self, db: Session, *, today: Callable[[], date] = date.today):
        self.db = db
        self._today = today

    # -------------------- interviewers --------------------

    def get_interviewer_for_user(self, user_id: int) -> Interviewer | None:
        return self.db.query(Interviewer).filter(Interviewer.user_id == int(user_id)).first()

    def get_or_create_interviewer(self, user_id: int) -> Interviewer:
        interviewer = self.get_interviewer_for_user(user_id)
        if interviewer:
            return interviewer

        interviewer = Interviewer(
            user_id=int(user_id),
            max_interviews_per_day=DEFAULT_MAX_INTERVIEWS_PER_DAY,
            is_active=True,
        )
        self.db.add(interviewer)
        self.db.flush()
        logger.info("Created interviewer %s for user %s", interviewer.id, user_id)
        return interviewer

    # -------------------- blocks --------------------

    def get_block(self, block_id: int) -> AvailabilityBlock | None:
        return self.db.query(AvailabilityBlock).filter(AvailabilityBlock.id == int(block_id)).first()

    def _owned_block(self, block_id: int, owner_interviewer_id: int) -> AvailabilityBlock:
        block = self.get_block(block_id)
        # Someone else's block is reported exactly like a missing one.
        if not block or int(block.interviewer_id) != int(owner_interviewer_id):
            raise NotFoundError(get_error_message("block_not_found"), details={"availability_id": block_id})
        return block

    def _ensure_mutable(self, block: AvailabilityBlock) -> None:
        if block.is_booked:
            raise ConflictError(get_error_message("block_booked"), details={"availability_id": block.id})
        in_use = (
            self.db.query(InterviewSession.id)
            .filter(
                InterviewSession.availability_block_id == block.id,
                InterviewSession.is_active.is_(True),
            )
            .first()
        )
        if in_use:
            raise ConflictError(get_error_message("block_in_use"), details={"availability_id": block.id})

    def replace_availability(
        self,
        interviewer_id: int,
        available_date: date,
        blocks: Iterable[BlockInput],
        *,
        slot_duration_minutes: int | None = None,
    ) -> list[AvailabilityBlock]:
        """
        Replace every block of (interviewer, date) with `blocks`.

        All input is validated before anything is deleted, so an invalid block
        leaves the date's previous blocks untouched.

        Unlike update_block / delete_block, this also replaces blocks that active
        sessions reference; those sessions keep their own date and times and their
        availability_block_id is set to NULL.
        """
        blocks = list(blocks)
        if available_date < self._today():
            raise ValidationError(
                get_error_message("past_date"),
                details={"date": available_date.isoformat()},
            )
        for b in blocks:
            validate_time_range(b.start_time, b.end_time, context=available_date.isoformat())

        duration = validate_integer_field(
            slot_duration_minutes if slot_duration_minutes is not None else DEFAULT_SLOT_MINUTES,
            "Slot duration",
            min_value=1,
        )

        deleted = (
            self.db.query(AvailabilityBlock)
            .filter(
                AvailabilityBlock.interviewer_id == int(interviewer_id),
                AvailabilityBlock.available_date == available_date,
            )
            .delete(synchronize_session=False)
        )

        saved: list[AvailabilityBlock] = []
        for b in sorted(blocks, key=lambda x: x.start_time):
            row = AvailabilityBlock(
                interviewer_id=int(interviewer_id),
                available_date=available_date,
                start_time=b.start_time,
                end_time=b.end_time,
                slot_duration_minutes=duration,
                max_concurrent_interviews=1,
                notes=b.notes,
                is_booked=False,
                is_active=True,
            )
            self.db.add(row)
            saved.append(row)
        self.db.flush()

        logger.info(
            "Replaced availability for interviewer %s on %s: %d removed, %d saved",
            interviewer_id, available_date, deleted, len(saved),
        )
        return saved

    def update_block(
        self,
        block_id: int,
        owner_interviewer_id: int,
        *,
        start_time: time,
        end_time: time,
        notes: str | None = None,
    ) -> AvailabilityBlock:
        block = self._owned_block(block_id, owner_interviewer_id)
        self._ensure_mutable(block)
        validate_time_range(start_time, end_time)

        block.start_time = start_time
        block.end_time = end_time
        block.notes = notes
        self.db.flush()
        logger.info("Updated availability block %s", block.id)
        return block

    def delete_block(self, block_id: int, owner_interviewer_id: int) -> None:
        block = self._owned_block(block_id, owner_interviewer_id)
        self._ensure_mutable(block)
        self.db.delete(block)
        self.db.flush()
        logger.info("Deleted availability block %s", block_id)

    def list_blocks(self, interviewer_id: int, active_only: bool = True) -> list[AvailabilityBlock]:
        q = self.db.query(AvailabilityBlock).filter(AvailabilityBlock.interviewer_id == int(interviewer_id))
        if active_only:
            q = q.filter(AvailabilityBlock.is_active.is_(True))
        return q.order_by(AvailabilityBlock.available_date.asc(), AvailabilityBlock.start_time.asc()).all()

    def find_bookable_blocks(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[AvailabilityBlock]:
        """Active, unbooked blocks of active interviewers, ordered by (date, start time)."""
        q = (
            self.db.query(AvailabilityBlock)
            .join(Interviewer, AvailabilityBlock.interviewer_id == Interviewer.id)
            .options(joinedload(AvailabilityBlock.interviewer).joinedload(Interviewer.user))
            .filter(
                AvailabilityBlock.is_active.is_(True),
                AvailabilityBlock.is_booked.is_(False),
                Interviewer.is_active.is_(True),
            )
        )
        if start_date is not None:
            q = q.filter(AvailabilityBlock.available_date >= start_date)
        if end_date is not None:
            q = q.filter(AvailabilityBlock.available_date <= end_date)
        return q.order_by(
            AvailabilityBlock.available_date.asc(),
            AvailabilityBlock.start_time.asc(),
            AvailabilityBlock.interviewer_id.asc(),
        ).all()
