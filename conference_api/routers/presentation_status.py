from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from conference_api.database import get_db
from conference_api.models.conference import Conference
from conference_api.models.presentation import Presentation, REVIEW_STATUSES
from conference_api.models.presentation_author import PresentationAuthor
from conference_api.models.section import Section
from conference_api.utils.permissions import (
    require_conference_manager, require_organizer, owning_conference, can_manage_conference,
)
from conference_api.schemas.presentation import (
    PresentationStatusIn, BulkStatusUpdateIn,
    PresentationOut, StatusStatistics, PresentationsByStatusOut,
    StatusUpdateOut, BulkStatusUpdateOut,
)

import logging
logger = logging.getLogger("app.review")


router = APIRouter(tags=["Presentations - Review Status"])


def _check_status(status: str):
    if status not in REVIEW_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid review status")


def _presentation_out(p: Presentation) -> PresentationOut:
    return PresentationOut(
        id=p.id,
        title=p.title,
        conference_id=p.conference_id,
        section_id=p.section_id,
        review_status=p.review_status,
        review_comments=p.review_comments,
        reviewed_at=p.reviewed_at,
        presenters=[a.presenter.name for a in p.authors if a.is_presenter and a.presenter],
    )


def _mark_reviewed(p: Presentation, status: str, comments: Optional[str], user):
    p.review_status = status
    p.review_comments = comments or None
    p.reviewed_at = datetime.utcnow()
    p.reviewed_by_id = user.id


# 依審稿狀態分組 + 統計
@router.get("/conferences/{conference_id}/presentations/by-status", response_model=PresentationsByStatusOut)
def get_presentations_by_status(
    conference_id: int,
    status: Optional[str] = Query(None, description="PENDING / APPROVED / REJECTED / REVISION_REQUESTED / all"),
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    conference = db.query(Conference).filter(Conference.id == conference_id).first()
    if not conference:
        raise HTTPException(status_code=404, detail="Conference not found")
    require_conference_manager(user, conference, "view presentations for this conference")

    only = status if status and status != "all" else None
    if only:
        _check_status(only)

    q = (
        db.query(Presentation)
        .outerjoin(Section, Section.id == Presentation.section_id)
        .filter(or_(Presentation.conference_id == conference_id, Section.conference_id == conference_id))
        .options(selectinload(Presentation.authors).selectinload(PresentationAuthor.presenter))
    )
    if only:
        q = q.filter(Presentation.review_status == only)

    rows = q.order_by(Presentation.review_status.asc(), Presentation.order.asc(), Presentation.id.asc()).all()
    flat = [_presentation_out(p) for p in rows]

    grouped = {}
    for p in flat:
        grouped.setdefault(p.review_status, []).append(p)

    statistics = StatusStatistics(
        total=len(flat),
        pending=len(grouped.get("PENDING", [])),
        approved=len(grouped.get("APPROVED", [])),
        rejected=len(grouped.get("REJECTED", [])),
        revision_requested=len(grouped.get("REVISION_REQUESTED", [])),
    )
    return PresentationsByStatusOut(
        statistics=statistics,
        presentations=flat if only else grouped,
        flat=flat,
    )


# 更新單篇審稿狀態
@router.put("/presentations/{presentation_id}/status", response_model=StatusUpdateOut)
def update_presentation_status(
    presentation_id: int,
    body: PresentationStatusIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    p = (
        db.query(Presentation)
        .options(joinedload(Presentation.conference), joinedload(Presentation.section).joinedload(Section.conference))
        .filter(Presentation.id == presentation_id)
        .first()
    )
    if not p:
        raise HTTPException(status_code=404, detail="Presentation not found")
    require_conference_manager(user, owning_conference(p), "update this presentation")
    _check_status(body.review_status)

    previous = p.review_status
    _mark_reviewed(p, body.review_status, body.review_comments, user)
    db.commit()
    db.refresh(p)

    logger.info("review status presentation=%s %s -> %s by user=%s", p.id, previous, p.review_status, user.id)
    return StatusUpdateOut(
        message="Presentation status updated successfully",
        presentation=_presentation_out(p),
    )


# 批次更新審稿狀態
@router.post("/presentations/bulk-status-update", response_model=BulkStatusUpdateOut)
def bulk_update_presentation_status(
    body: BulkStatusUpdateIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    ids = list(dict.fromkeys(body.presentation_ids))
    if not ids:
        raise HTTPException(status_code=400, detail="presentation_ids is empty")
    _check_status(body.review_status)

    presentations = (
        db.query(Presentation)
        .options(joinedload(Presentation.conference), joinedload(Presentation.section).joinedload(Section.conference))
        .filter(Presentation.id.in_(ids))
        .all()
    )

    unauthorized = [p.id for p in presentations if not can_manage_conference(user, owning_conference(p))]
    if unauthorized:
        raise HTTPException(403, {
            "message": "Not authorized to update some presentations",
            "unauthorized_ids": sorted(unauthorized),
        })

    for p in presentations:
        _mark_reviewed(p, body.review_status, body.review_comments, user)
    db.commit()

    logger.info("bulk review status %s on %d/%d presentations", body.review_status, len(presentations), len(ids))
    return BulkStatusUpdateOut(
        message=f"Successfully updated {len(presentations)} presentations",
        updated_count=len(presentations),
        requested_count=len(body.presentation_ids),
    )
