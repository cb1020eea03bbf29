from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from conference_api.config import settings
from conference_api.database import get_db
from conference_api.models.time_slot import TimeSlot
from conference_api.utils.permissions import require_conference_manager, require_organizer, owning_conference
from conference_api.utils.timeslots import generate_time_slots
from conference_api.schemas.time_slot import (
    TimeSlotOut, GenerateTimeSlotsIn, GenerateTimeSlotsOut, AssignTimeSlotIn,
)
from conference_api.schemas.conflict import AssignmentOut
from conference_api.services.conflict_detection import (
    SchedulingConflictError,
    TimeSlotOccupiedError,
    load_presentation_for_check,
    assign_with_conflict_check,
    warnings_after_assignment,
)
from conference_api.routers.conflicts import get_section_or_404, conflict_http_error

import logging
logger = logging.getLogger("app.time_slots")


router = APIRouter(tags=["Scheduling - Time Slots"])


def _get_slot_or_404(db: Session, slot_id: int) -> TimeSlot:
    slot = db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
    if not slot:
        raise HTTPException(status_code=404, detail="Time slot not found")
    return slot


@router.get("/sections/{section_id}/time-slots", response_model=list[TimeSlotOut])
def get_section_time_slots(
    section_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    section = get_section_or_404(db, section_id)
    require_conference_manager(user, section.conference, "view time slots for this section")

    return (
        db.query(TimeSlot)
        .filter(TimeSlot.section_id == section_id)
        .order_by(TimeSlot.order.asc())
        .all()
    )


# 依 section 時段切出報告時段（會覆蓋舊的）
@router.post("/sections/{section_id}/time-slots/generate", response_model=GenerateTimeSlotsOut)
def generate_section_time_slots(
    section_id: int,
    body: GenerateTimeSlotsIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    section = get_section_or_404(db, section_id)
    require_conference_manager(user, section.conference, "modify time slots for this section")

    start = body.start_time or section.start_time
    end = body.end_time or section.end_time
    if start is None or (end is None and not body.slot_count):
        raise HTTPException(status_code=400, detail="Section has no time window; pass start_time and end_time")
    if end is not None and end <= start and not body.slot_count:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")

    slot_minutes = body.slot_duration or settings.DEFAULT_SLOT_MINUTES
    break_minutes = body.break_duration if body.break_duration is not None else settings.DEFAULT_BREAK_MINUTES
    slots = generate_time_slots(start, end, slot_minutes, break_minutes, body.slot_count)

    db.query(TimeSlot).filter(TimeSlot.section_id == section_id).delete(synchronize_session=False)
    created = [
        TimeSlot(
            section_id=section_id,
            start_time=s,
            end_time=e,
            order=order,
            slot_type="PRESENTATION",
            is_occupied=False,
        )
        for order, s, e in slots
    ]
    db.add_all(created)
    db.commit()
    for slot in created:
        db.refresh(slot)

    logger.info("generated %d time slots for section=%s", len(created), section_id)
    return GenerateTimeSlotsOut(
        message=f"Generated {len(created)} time slots",
        time_slots=[TimeSlotOut.model_validate(s) for s in created],
    )


# 把報告排進時段（同樣會檢查講者衝突）
@router.post("/time-slots/{slot_id}/assign", response_model=AssignmentOut)
def assign_presentation_to_time_slot(
    slot_id: int,
    body: AssignTimeSlotIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    slot = _get_slot_or_404(db, slot_id)
    section = slot.section
    require_conference_manager(user, section.conference, "modify this time slot")

    presentation = load_presentation_for_check(db, body.presentation_id)
    if not presentation:
        raise HTTPException(status_code=404, detail="Presentation not found")
    require_conference_manager(user, owning_conference(presentation, section), "assign this presentation")

    try:
        report = assign_with_conflict_check(
            db, presentation, section, force_assign=body.force_assign, time_slot=slot,
        )
    except SchedulingConflictError as err:
        raise conflict_http_error(err)
    except TimeSlotOccupiedError:
        raise HTTPException(status_code=409, detail="Time slot is already occupied")

    return AssignmentOut(
        message="Presentation assigned to time slot successfully",
        presentation_id=body.presentation_id,
        section_id=slot.section_id,
        warnings=warnings_after_assignment(report, body.force_assign),
    )


@router.delete("/time-slots/{slot_id}/unassign")
def unassign_presentation_from_time_slot(
    slot_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    slot = _get_slot_or_404(db, slot_id)
    require_conference_manager(user, slot.section.conference, "modify this time slot")

    slot.presentation_id = None
    slot.is_occupied = False
    db.commit()
    return {"message": "Presentation unassigned from time slot successfully"}
