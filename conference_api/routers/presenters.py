from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from conference_api.database import get_db
from conference_api.models.conference import Conference
from conference_api.models.presentation import Presentation
from conference_api.models.presentation_author import PresentationAuthor
from conference_api.models.presenter import Presenter
from conference_api.models.presenter_conflict import PresenterConflict
from conference_api.models.section import Section
from conference_api.models.user import User
from conference_api.utils.permissions import require_conference_manager, require_organizer
from conference_api.schemas.presenter import (
    PresenterConflictIn, PresenterConflictOut,
    ConferencePresenterOut, PresentingOut, AssignedSectionOut,
    PresenterIn, PresenterOut,
)

import logging
logger = logging.getLogger("app.presenters")


router = APIRouter(tags=["Presenters"])


def _get_presenter_or_404(db: Session, presenter_id: int) -> Presenter:
    presenter = db.query(Presenter).filter(Presenter.id == presenter_id).first()
    if not presenter:
        raise HTTPException(status_code=404, detail="Presenter not found")
    return presenter


# 會議內所有講者（含排程與不便時段）
@router.get("/conferences/{conference_id}/presenters", response_model=list[ConferencePresenterOut])
def get_conference_presenters(
    conference_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    conference = db.query(Conference).filter(Conference.id == conference_id).first()
    if not conference:
        raise HTTPException(status_code=404, detail="Conference not found")
    require_conference_manager(user, conference, "view presenters for this conference")

    presenters = (
        db.query(Presenter)
        .join(PresentationAuthor, PresentationAuthor.presenter_id == Presenter.id)
        .join(Presentation, Presentation.id == PresentationAuthor.presentation_id)
        .outerjoin(Section, Section.id == Presentation.section_id)
        .filter(or_(Presentation.conference_id == conference_id, Section.conference_id == conference_id))
        .options(
            selectinload(Presenter.presentations)
            .selectinload(PresentationAuthor.presentation)
            .selectinload(Presentation.section),
            selectinload(Presenter.conflicts),
        )
        .distinct()
        .order_by(Presenter.id.asc())
        .all()
    )

    out = []
    for p in presenters:
        presenting = []
        for link in p.presentations:
            if not link.is_presenter:
                continue
            talk = link.presentation
            s = talk.section
            presenting.append(PresentingOut(
                presentation_id=talk.id,
                title=talk.title,
                section=AssignedSectionOut(
                    id=s.id, name=s.name, start_time=s.start_time, end_time=s.end_time,
                ) if s else None,
            ))
        out.append(ConferencePresenterOut(
            id=p.id,
            name=p.name,
            email=p.email,
            affiliation=p.affiliation,
            presentations=presenting,
            conflicts=[PresenterConflictOut.model_validate(c) for c in p.conflicts],
            presentation_count=len(p.presentations),
            conflict_count=len(p.conflicts),
        ))
    return out


# 建立講者（同 user_id 或 email 已存在就直接回傳）
@router.post("/presenters", response_model=PresenterOut)
def create_or_find_presenter(
    body: PresenterIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    matches = []
    if body.user_id is not None:
        matches.append(Presenter.user_id == body.user_id)
    if body.email:
        matches.append(Presenter.email == body.email)

    presenter = None
    if matches:
        presenter = db.query(Presenter).filter(or_(*matches)).order_by(Presenter.id.asc()).first()
    if presenter:
        return presenter

    # FK 檢查
    if body.user_id is not None:
        if not db.query(User.id).filter(User.id == body.user_id).first():
            raise HTTPException(status_code=400, detail="user_id not found")

    presenter = Presenter(
        user_id=body.user_id,
        name=body.name,
        email=body.email,
        bio=body.bio,
        affiliation=body.affiliation,
    )
    db.add(presenter)
    db.commit()
    db.refresh(presenter)

    logger.info("created presenter id=%s", presenter.id)
    return presenter


# 新增講者不便時段
@router.post("/presenters/{presenter_id}/conflicts", response_model=PresenterConflictOut, status_code=201)
def add_presenter_conflict(
    presenter_id: int,
    body: PresenterConflictIn,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    _get_presenter_or_404(db, presenter_id)

    conflict = PresenterConflict(
        presenter_id=presenter_id,
        conflict_type=body.conflict_type,
        conflict_date=body.conflict_date if body.conflict_type == "FULL_DAY" else None,
        conflict_start_time=body.conflict_start_time if body.conflict_type == "TIME_SLOT" else None,
        conflict_end_time=body.conflict_end_time if body.conflict_type == "TIME_SLOT" else None,
        description=body.description,
    )
    db.add(conflict)
    db.commit()
    db.refresh(conflict)

    logger.info("declared %s conflict id=%s for presenter=%s", conflict.conflict_type, conflict.id, presenter_id)
    return conflict


# 查看講者不便時段
@router.get("/presenters/{presenter_id}/conflicts", response_model=list[PresenterConflictOut])
def get_presenter_conflicts(
    presenter_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    _get_presenter_or_404(db, presenter_id)
    return (
        db.query(PresenterConflict)
        .filter(PresenterConflict.presenter_id == presenter_id)
        .order_by(PresenterConflict.created_at.desc(), PresenterConflict.id.desc())
        .all()
    )


# 移除不便時段
@router.delete("/presenter-conflicts/{conflict_id}")
def remove_presenter_conflict(
    conflict_id: int,
    db: Session = Depends(get_db),
    user=Depends(require_organizer),
):
    conflict = db.query(PresenterConflict).filter(PresenterConflict.id == conflict_id).first()
    if not conflict:
        raise HTTPException(status_code=404, detail="Conflict not found")

    db.delete(conflict)
    db.commit()
    return {"message": "Conflict removed successfully"}
