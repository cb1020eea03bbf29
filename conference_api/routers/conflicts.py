from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from conference_api.database import get_db
from conference_api.models.conference import Conference
from conference_api.models.section import Section
from conference_api.utils.permissions import require_conference_manager, require_organizer, owning_conference
from conference_api.schemas.conflict import (
    CheckConflictsIn, AssignWithConflictCheckIn,
    ConflictReport, AssignmentOut, ConflictSummaryOut,
)
from conference_api.services.conflict_detection import (
    SchedulingConflictError,
    load_presentation_for_check,
    load_conference_presentations,
    detect_conflicts_for_assignment,
    assign_with_conflict_check,
    warnings_after_assignment,
    summarize_conference_conflicts,
)

import logging
logger = logging.getLogger("app.conflicts")


router = APIRouter(tags=["Scheduling - Conflicts"])


def get_section_or_404(db: Session, section_id: int) -> Section:
    section = db.query(Section).filter(Section.id == section_id).first()
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")
    return section


def _load_for_assignment(db: Session, user, presentation_id: int, section_id: int, action: str):
    presentation = load_presentation_for_check(db, presentation_id)
    if not presentation:
        raise HTTPException(status_code=404, detail="Presentation not found")
    section = get_section_or_404(db, section_id)

    # rights on the talk's own conference and on the target section's
    require_conference_manager(user, owning_conference(presentation, section), action)
    require_conference_manager(user, section.conference, action)
    return presentation, section


def conflict_http_error(err: SchedulingConflictError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": "Scheduling conflicts detected",
            "conflicts": [c.model_dump(mode="json") for c in err.report.conflicts],
            "can_force_assign": True,
        },
    )


# 檢查衝突（不寫入）
@router.post("/presentations/{presentation_id}/check-conflicts", response_model=ConflictReport)
def check_presentation_conflicts(
    presentation_id: int,
    body: CheckConflictsIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    presentation, section = _load_for_assignment(
        db, user, presentation_id, body.section_id, "check conflicts for this presentation"
    )
    report = detect_conflicts_for_assignment(presentation, section)
    logger.info(
        "conflict check presentation=%s section=%s conflicts=%d can_proceed=%s",
        presentation_id, body.section_id, len(report.conflicts), report.can_proceed,
    )
    return report


# 排入議程（有衝突就 409，除非 force_assign）
@router.post("/presentations/{presentation_id}/assign-with-conflict-check", response_model=AssignmentOut)
def assign_presentation_with_conflict_check(
    presentation_id: int,
    body: AssignWithConflictCheckIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    presentation, section = _load_for_assignment(
        db, user, presentation_id, body.section_id, "assign this presentation"
    )
    try:
        report = assign_with_conflict_check(db, presentation, section, force_assign=body.force_assign)
    except SchedulingConflictError as err:
        raise conflict_http_error(err)

    return AssignmentOut(
        message="Presentation assigned successfully",
        presentation_id=presentation_id,
        section_id=body.section_id,
        warnings=warnings_after_assignment(report, body.force_assign),
    )


# 整場會議的講者撞期總覽
@router.get("/conferences/{conference_id}/conflicts/summary", response_model=ConflictSummaryOut)
def get_conference_conflict_summary(
    conference_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    conference = db.query(Conference).filter(Conference.id == conference_id).first()
    if not conference:
        raise HTTPException(status_code=404, detail="Conference not found")
    require_conference_manager(user, conference, "view conflicts for this conference")

    summary = summarize_conference_conflicts(load_conference_presentations(db, conference_id))
    logger.info("conflict summary conference=%s total=%d", conference_id, summary.total_conflicts)
    return summary
