import logging
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..utils.roles import hr_only, interviewer_only
from .responses import respond, scheduling_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/panelists", tags=["Availability"])


class TimeSlotIn(BaseModel):
    start_time: str = Field(..., min_length=4)
    end_time: str = Field(..., min_length=4)
    notes: str | None = None


class AvailabilityIn(BaseModel):
    # {"2030-01-20": [{"start_time": "09:00", "end_time": "12:00"}], ...}
    time_slots: dict[str, list[TimeSlotIn]]
    slot_duration_minutes: int | None = Field(default=None, ge=1)


@router.post("/availability")
def submit_availability(
    body: AvailabilityIn,
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    """Replace the caller's availability for every date in the payload."""
    time_slots = {d: [s.model_dump() for s in slots] for d, slots in body.time_slots.items()}
    result = scheduling_service(db).submit_availability(
        user["sub"], time_slots, slot_duration_minutes=body.slot_duration_minutes
    )
    return respond(result)


@router.get("/availability")
def my_availability(
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    return respond(scheduling_service(db).list_my_availability(user["sub"]))


@router.put("/availability/{availability_id}")
def update_availability(
    availability_id: int,
    body: TimeSlotIn,
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    result = scheduling_service(db).update_availability(
        availability_id,
        user["sub"],
        start_time=body.start_time,
        end_time=body.end_time,
        notes=body.notes,
    )
    return respond(result)


@router.delete("/availability/{availability_id}")
def delete_availability(
    availability_id: int,
    db: Session = Depends(get_db),
    user=Depends(interviewer_only),
):
    return respond(scheduling_service(db).delete_availability(availability_id, user["sub"]))


@router.get("/available-slots")
def available_slots(
    start_date: date | None = None,
    end_date: date | None = None,
    duration: int | None = None,
    db: Session = Depends(get_db),
    user=Depends(hr_only),
):
    """Bookable slots grouped by interviewer and date, cut to `duration` minutes (default 60)."""
    result = scheduling_service(db).list_bookable_slots(start_date, end_date, duration)
    if not result.success:
        return respond(result)
    return respond(result, data=[group.as_dict() for group in result.data])
