"""Presenter scheduling conflict detection.

A presentation may only move into a section if none of its presenters is
already presenting somewhere else at that time, and none of them declared
themselves unavailable for it. Unscheduled sections (no start/end) never
conflict with anything.

A talk that occupies a time slot is compared by the slot's window, otherwise
by its whole section.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session, joinedload, selectinload

from conference_api.config import settings
from conference_api.models.presentation import Presentation, INACTIVE_REVIEW_STATUSES
from conference_api.models.presentation_author import PresentationAuthor
from conference_api.models.presenter import Presenter
from conference_api.models.section import Section
from conference_api.models.time_slot import TimeSlot
from conference_api.schemas.conflict import (
    ConflictDetail, ConflictReport, ConflictSummaryOut,
    ConflictTimeSlot, DoubleBookingOut, ScheduledPresentationOut,
)
from conference_api.utils.conflict import has_window, overlaps, same_day

logger = logging.getLogger("app.conflicts")

PRESENTER_TIME_CONFLICT = "PRESENTER_TIME_CONFLICT"
PRESENTER_DECLARED_CONFLICT = "PRESENTER_DECLARED_CONFLICT"
PRESENTER_DOUBLE_BOOKING = "PRESENTER_DOUBLE_BOOKING"

BLOCKING = "BLOCKING"
WARNING = "WARNING"


class SchedulingConflictError(Exception):
    """Blocking conflicts found and the caller did not force the assignment."""

    def __init__(self, report: ConflictReport):
        super().__init__("Scheduling conflicts detected")
        self.report = report


class TimeSlotOccupiedError(Exception):
    pass


def load_presentation_for_check(db: Session, presentation_id: int) -> Presentation | None:
    """Presentation plus everything the detector walks, in a few queries."""
    presenter_path = selectinload(Presentation.authors).selectinload(PresentationAuthor.presenter)
    other_talks = (
        presenter_path
        .selectinload(Presenter.presentations)
        .selectinload(PresentationAuthor.presentation)
    )
    return (
        db.query(Presentation)
        .options(
            other_talks.joinedload(Presentation.section).joinedload(Section.category),
            other_talks.selectinload(Presentation.time_slots),
            presenter_path.selectinload(Presenter.conflicts),
            joinedload(Presentation.section).joinedload(Section.conference),
            joinedload(Presentation.conference),
        )
        .filter(Presentation.id == presentation_id)
        .first()
    )


def presenters_of(presentation: Presentation) -> list[Presenter]:
    # only authors flagged as presenting, each person once
    seen = set()
    out = []
    for author in presentation.authors:
        presenter = author.presenter
        if not author.is_presenter or presenter is None or presenter.id in seen:
            continue
        seen.add(presenter.id)
        out.append(presenter)
    return out


def talk_window(presentation: Presentation):
    """(start, end) the talk actually occupies; (None, None) when unscheduled."""
    section = presentation.section
    if section is None:
        return None, None
    for slot in presentation.time_slots:
        if slot.is_occupied and slot.section_id == section.id:
            return slot.start_time, slot.end_time
    return section.start_time, section.end_time


def declared_conflict_severity() -> str:
    severity = (settings.DECLARED_CONFLICT_SEVERITY or BLOCKING).upper()
    return severity if severity in (BLOCKING, WARNING) else BLOCKING


def _is_active(presentation: Presentation) -> bool:
    return presentation.review_status not in INACTIVE_REVIEW_STATUSES


def _time_conflicts(presenter: Presenter, presentation_id: int, start, end):
    for link in presenter.presentations:
        other = link.presentation
        if not link.is_presenter or other is None:
            continue
        if other.id == presentation_id or other.section is None or not _is_active(other):
            continue

        other_start, other_end = talk_window(other)
        if not has_window(other_start, other_end):
            continue
        if not overlaps(start, end, other_start, other_end):
            continue

        section = other.section
        category = section.category.name if section.category else None
        yield ConflictDetail(
            type=PRESENTER_TIME_CONFLICT,
            severity=BLOCKING,
            presenter_id=presenter.id,
            presenter_name=presenter.name,
            conflicting_presentation_id=other.id,
            conflicting_presentation=other.title,
            conflicting_category=category,
            conflicting_session=section.name,
            conflict_time_slot=ConflictTimeSlot(start_time=other_start, end_time=other_end),
            message=(
                f'{presenter.name} is already presenting "{other.title}" in '
                f'{category or "another category"} at the same time'
            ),
        )


def _declared_details(conflict) -> dict:
    return {
        "id": conflict.id,
        "conflict_type": conflict.conflict_type,
        "conflict_date": conflict.conflict_date,
        "conflict_start_time": conflict.conflict_start_time,
        "conflict_end_time": conflict.conflict_end_time,
        "description": conflict.description,
    }


def _declared_conflicts(presenter: Presenter, start, end, severity: str):
    for declared in presenter.conflicts:
        if declared.conflict_type == "TIME_SLOT":
            if not has_window(declared.conflict_start_time, declared.conflict_end_time):
                continue
            if not overlaps(start, end, declared.conflict_start_time, declared.conflict_end_time):
                continue
            message = f"{presenter.name} has a declared time conflict"
        elif declared.conflict_type == "FULL_DAY":
            if declared.conflict_date is None or not same_day(start, declared.conflict_date):
                continue
            message = f"{presenter.name} is unavailable on {declared.conflict_date.isoformat()}"
        else:
            continue

        if declared.description:
            message = f"{message}: {declared.description}"

        yield ConflictDetail(
            type=PRESENTER_DECLARED_CONFLICT,
            severity=severity,
            presenter_id=presenter.id,
            presenter_name=presenter.name,
            message=message,
            details=_declared_details(declared),
        )


def build_report(conflicts: list[ConflictDetail]) -> ConflictReport:
    return ConflictReport(
        has_conflicts=bool(conflicts),
        conflicts=conflicts,
        can_proceed=not any(c.severity == BLOCKING for c in conflicts),
    )


def detect_conflicts_for_assignment(
    presentation: Presentation,
    proposed: Section,
    time_slot: TimeSlot | None = None,
) -> ConflictReport:
    """Check every presenter of `presentation` against the proposed window.

    The window is `time_slot`'s when one is given, else the whole `proposed` section.
    """
    if time_slot is not None:
        start, end = time_slot.start_time, time_slot.end_time
    else:
        start, end = proposed.start_time, proposed.end_time
    if not has_window(start, end):
        return build_report([])

    severity = declared_conflict_severity()
    conflicts = []
    for presenter in presenters_of(presentation):
        conflicts.extend(_time_conflicts(presenter, presentation.id, start, end))
        conflicts.extend(_declared_conflicts(presenter, start, end, severity))

    return build_report(conflicts)


def _lock_for_assignment(db: Session, presentation: Presentation, time_slot: TimeSlot | None):
    """
    SELECT ... FOR UPDATE on the presenters (and the target slot), then drop
    cached state so the check below reads what other transactions committed.
    Sqlite has no row locks, the clause is skipped there.
    """
    ids = sorted(p.id for p in presenters_of(presentation))
    if ids:
        (
            db.query(Presenter.id)
            .filter(Presenter.id.in_(ids))
            .order_by(Presenter.id)
            .with_for_update()
            .all()
        )
    if time_slot is not None:
        db.query(TimeSlot.id).filter(TimeSlot.id == time_slot.id).with_for_update().all()
    db.expire_all()


def _release_other_slots(db: Session, presentation: Presentation, section: Section, time_slot: TimeSlot | None):
    # a talk holds at most one slot, and only inside its current section
    stale = db.query(TimeSlot).filter(TimeSlot.presentation_id == presentation.id)
    if time_slot is not None:
        stale = stale.filter(TimeSlot.id != time_slot.id)
    else:
        stale = stale.filter(TimeSlot.section_id != section.id)
    stale.update(
        {TimeSlot.presentation_id: None, TimeSlot.is_occupied: False},
        synchronize_session=False,
    )


def assign_with_conflict_check(
    db: Session,
    presentation: Presentation,
    section: Section,
    force_assign: bool = False,
    time_slot: TimeSlot | None = None,
) -> ConflictReport:
    """
    Re-check and write inside one transaction.
    Raises SchedulingConflictError (nothing written) on blocking conflicts unless forced,
    TimeSlotOccupiedError when `time_slot` already holds another talk.
    """
    _lock_for_assignment(db, presentation, time_slot)

    if time_slot is not None and time_slot.is_occupied and time_slot.presentation_id not in (None, presentation.id):
        message = f"Time slot {time_slot.id} is already occupied"
        db.rollback()
        raise TimeSlotOccupiedError(message)

    report = detect_conflicts_for_assignment(presentation, section, time_slot)

    if not report.can_proceed and not force_assign:
        db.rollback()
        logger.info(
            "assignment blocked presentation=%s section=%s conflicts=%d",
            presentation.id, section.id, len(report.blocking),
        )
        raise SchedulingConflictError(report)

    if report.blocking:
        logger.warning(
            "forced assignment presentation=%s section=%s overriding %d blocking conflict(s)",
            presentation.id, section.id, len(report.blocking),
        )

    _release_other_slots(db, presentation, section, time_slot)
    presentation.section_id = section.id
    presentation.assigned_at = datetime.utcnow()
    if time_slot is not None:
        time_slot.presentation_id = presentation.id
        time_slot.is_occupied = True

    db.commit()
    logger.info("assigned presentation=%s section=%s", presentation.id, section.id)
    return report


def warnings_after_assignment(report: ConflictReport, forced: bool) -> list[ConflictDetail]:
    # a forced assignment reports the overridden blocking conflicts as warnings too
    if forced:
        return list(report.conflicts)
    return report.warnings


# ---------------------------------------------------------------------------
# Conference-wide scan
# ---------------------------------------------------------------------------


def load_conference_presentations(db: Session, conference_id: int) -> list[Presentation]:
    return (
        db.query(Presentation)
        .join(Section, Section.id == Presentation.section_id)
        .options(
            joinedload(Presentation.section).joinedload(Section.category),
            selectinload(Presentation.authors).selectinload(PresentationAuthor.presenter),
            selectinload(Presentation.time_slots),
        )
        .filter(Section.conference_id == conference_id)
        .order_by(Presentation.id.asc())
        .all()
    )


def _scheduled_out(presentation: Presentation) -> ScheduledPresentationOut:
    section = presentation.section
    start, end = talk_window(presentation)
    return ScheduledPresentationOut(
        id=presentation.id,
        title=presentation.title,
        section=section.name,
        category=section.category.name if section.category else None,
        start_time=start,
        end_time=end,
    )


def summarize_conference_conflicts(presentations: list[Presentation]) -> ConflictSummaryOut:
    """Every pair of scheduled talks once, flag shared presenters in overlapping windows."""
    scheduled = sorted(
        (p for p in presentations if _is_active(p) and has_window(*talk_window(p))),
        key=lambda p: p.id,
    )

    conflicts = []
    for i, first in enumerate(scheduled):
        first_presenters = {p.id for p in presenters_of(first)}
        if not first_presenters:
            continue
        first_start, first_end = talk_window(first)
        for second in scheduled[i + 1:]:
            second_start, second_end = talk_window(second)
            if not overlaps(first_start, first_end, second_start, second_end):
                continue
            for presenter in presenters_of(second):
                if presenter.id not in first_presenters:
                    continue
                conflicts.append(DoubleBookingOut(
                    presenter_id=presenter.id,
                    presenter_name=presenter.name,
                    presentation1=_scheduled_out(first),
                    presentation2=_scheduled_out(second),
                ))

    blocking = sum(1 for c in conflicts if c.severity == BLOCKING)
    return ConflictSummaryOut(
        total_conflicts=len(conflicts),
        blocking_conflicts=blocking,
        warning_conflicts=len(conflicts) - blocking,
        conflicts=conflicts,
    )
