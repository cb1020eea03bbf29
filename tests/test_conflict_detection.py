"""Tests for the presenter conflict aggregator, the assignment gate and the summary scan."""

from datetime import date

import pytest

from conference_api.config import settings
from conference_api.models.presentation import Presentation
from conference_api.models.time_slot import TimeSlot
from conference_api.services.conflict_detection import (
    BLOCKING,
    PRESENTER_DECLARED_CONFLICT,
    PRESENTER_TIME_CONFLICT,
    WARNING,
    SchedulingConflictError,
    TimeSlotOccupiedError,
    assign_with_conflict_check,
    detect_conflicts_for_assignment,
    load_conference_presentations,
    load_presentation_for_check,
    summarize_conference_conflicts,
)
from conftest import at, make_slot


def _check(db, talk, section):
    return detect_conflicts_for_assignment(load_presentation_for_check(db, talk.id), section)


def test_back_to_back_sections_do_not_conflict(db, build, conference):
    ada = build.presenter()
    early = build.section(conference, at(9), at(9, 30), name="Early")
    late = build.section(conference, at(9, 30), at(10), name="Late")
    build.presentation("Talk A", [ada], section=early)
    talk_b = build.presentation("Talk B", [ada])

    report = _check(db, talk_b, late)

    assert report.conflicts == []
    assert report.can_proceed
    assert not report.has_conflicts


def test_overlapping_sections_give_one_blocking_time_conflict(db, build, conference):
    ada = build.presenter()
    track = build.category(conference, "Data")
    first = build.section(conference, at(9), at(10), name="Morning", category=track)
    second = build.section(conference, at(9, 30), at(10, 30), name="Overlap")
    build.presentation("Talk A", [ada], section=first)
    talk_b = build.presentation("Talk B", [ada])

    report = _check(db, talk_b, second)

    assert len(report.conflicts) == 1
    conflict = report.conflicts[0]
    assert conflict.type == PRESENTER_TIME_CONFLICT
    assert conflict.severity == BLOCKING
    assert conflict.presenter_id == ada.id
    assert conflict.conflicting_presentation == "Talk A"
    assert conflict.conflicting_session == "Morning"
    assert conflict.conflicting_category == "Data"
    assert conflict.conflict_time_slot.start_time == at(9)
    assert not report.can_proceed


def test_unscheduled_sections_never_conflict(db, build, conference):
    ada = build.presenter()
    scheduled = build.section(conference, at(9), at(10))
    open_section = build.section(conference, name="TBD")
    build.presentation("Talk A", [ada], section=scheduled)
    build.full_day_conflict(ada, date(2026, 5, 14))
    talk_b = build.presentation("Talk B", [ada])

    assert _check(db, talk_b, open_section).conflicts == []


def test_other_talk_in_unscheduled_section_is_ignored(db, build, conference):
    ada = build.presenter()
    build.presentation("Talk A", [ada], section=build.section(conference, name="TBD"))
    talk_b = build.presentation("Talk B", [ada])

    assert _check(db, talk_b, build.section(conference, at(9), at(10))).can_proceed


def test_rejected_talks_do_not_hold_time(db, build, conference):
    ada = build.presenter()
    morning = build.section(conference, at(9), at(10))
    build.presentation("Rejected", [ada], section=morning, review_status="REJECTED")
    talk = build.presentation("Talk", [ada])

    assert _check(db, talk, build.section(conference, at(9), at(10))).conflicts == []


@pytest.mark.parametrize("status", ["PENDING", "REVISION_REQUESTED"])
def test_undecided_talks_still_hold_time(db, build, conference, status):
    ada = build.presenter()
    build.presentation("Undecided", [ada], section=build.section(conference, at(9), at(10)), review_status=status)
    talk = build.presentation("Talk", [ada])

    assert len(_check(db, talk, build.section(conference, at(9), at(10))).conflicts) == 1


def test_non_presenting_authors_are_not_checked(db, build, conference):
    ada, bob = build.presenter("Ada Lovelace"), build.presenter("Bob Smith")
    morning = build.section(conference, at(9), at(10))
    build.presentation("Bob talks", [bob], section=morning)
    talk = build.presentation("Ada talks", [ada], co_authors=[bob])

    assert _check(db, talk, build.section(conference, at(9), at(10))).conflicts == []


def test_moving_within_own_slot_is_not_a_conflict(db, build, conference):
    ada = build.presenter()
    morning = build.section(conference, at(9), at(10))
    talk = build.presentation("Talk", [ada], section=morning)

    assert _check(db, talk, morning).conflicts == []


def test_each_overlapping_presenter_is_reported(db, build, conference):
    ada, bob = build.presenter("Ada Lovelace"), build.presenter("Bob Smith")
    morning = build.section(conference, at(9), at(10))
    build.presentation("Ada solo", [ada], section=morning)
    build.presentation("Bob solo", [bob], section=morning)
    joint = build.presentation("Joint", [ada, bob])

    report = _check(db, joint, build.section(conference, at(9, 15), at(9, 45)))

    assert sorted(c.presenter_name for c in report.conflicts) == ["Ada Lovelace", "Bob Smith"]


def test_full_day_declared_conflict_blocks_any_time_that_day(db, build, conference):
    ada = build.presenter()
    build.full_day_conflict(ada, date(2026, 5, 14), description="Travelling")
    talk = build.presentation("Talk", [ada])

    report = _check(db, talk, build.section(conference, at(17), at(18)))

    assert len(report.conflicts) == 1
    conflict = report.conflicts[0]
    assert conflict.type == PRESENTER_DECLARED_CONFLICT
    assert conflict.severity == BLOCKING
    assert "2026-05-14" in conflict.message
    assert "Travelling" in conflict.message
    assert conflict.details["conflict_type"] == "FULL_DAY"


def test_full_day_declared_conflict_on_other_day_is_ignored(db, build, conference):
    ada = build.presenter()
    build.full_day_conflict(ada, date(2026, 5, 15))
    talk = build.presentation("Talk", [ada])

    assert _check(db, talk, build.section(conference, at(9), at(10))).can_proceed


def test_time_slot_declared_conflict(db, build, conference):
    ada = build.presenter()
    build.time_slot_conflict(ada, at(12), at(14), description="Lunch meeting")
    talk = build.presentation("Talk", [ada])

    blocked = _check(db, talk, build.section(conference, at(13), at(13, 30)))
    touching = _check(db, talk, build.section(conference, at(14), at(15)))

    assert [c.type for c in blocked.conflicts] == [PRESENTER_DECLARED_CONFLICT]
    assert touching.conflicts == []


def test_declared_severity_follows_settings(db, build, conference, monkeypatch):
    monkeypatch.setattr(settings, "DECLARED_CONFLICT_SEVERITY", "WARNING")
    ada = build.presenter()
    build.full_day_conflict(ada, date(2026, 5, 14))
    talk = build.presentation("Talk", [ada])

    report = _check(db, talk, build.section(conference, at(9), at(10)))

    assert [c.severity for c in report.conflicts] == [WARNING]
    assert report.has_conflicts
    assert report.can_proceed


def test_gate_rejects_blocking_conflicts_without_writing(db, build, conference):
    ada = build.presenter()
    morning = build.section(conference, at(9), at(10))
    build.presentation("Talk A", [ada], section=morning)
    talk_b = build.presentation("Talk B", [ada])
    target = build.section(conference, at(9, 30), at(10, 30))

    with pytest.raises(SchedulingConflictError) as exc_info:
        assign_with_conflict_check(db, load_presentation_for_check(db, talk_b.id), target)

    assert len(exc_info.value.report.blocking) == 1
    db.expire_all()
    assert db.get(Presentation, talk_b.id).section_id is None


def test_gate_force_assign_writes_and_keeps_report(db, build, conference):
    ada = build.presenter()
    morning = build.section(conference, at(9), at(10))
    build.presentation("Talk A", [ada], section=morning)
    talk_b = build.presentation("Talk B", [ada])
    target = build.section(conference, at(9, 30), at(10, 30))

    report = assign_with_conflict_check(
        db, load_presentation_for_check(db, talk_b.id), target, force_assign=True,
    )

    assert len(report.blocking) == 1
    db.expire_all()
    saved = db.get(Presentation, talk_b.id)
    assert saved.section_id == target.id
    assert saved.assigned_at is not None



def _slotted(db, build, title, presenter, section, slot):
    talk = build.presentation(title, [presenter])
    assign_with_conflict_check(db, load_presentation_for_check(db, talk.id), section, time_slot=slot)
    return talk


def test_slots_in_one_section_are_compared_by_slot_window(db, build, conference):
    ada = build.presenter()
    section = build.section(conference, at(9), at(10))
    first = make_slot(db, section, at(9), at(9, 20), order=1)
    second = make_slot(db, section, at(9, 30), at(9, 50), order=2)
    _slotted(db, build, "First", ada, section, first)
    talk = build.presentation("Second", [ada])

    report = detect_conflicts_for_assignment(load_presentation_for_check(db, talk.id), section, second)

    assert report.conflicts == []


def test_whole_section_assignment_overlaps_slotted_talk(db, build, conference):
    ada = build.presenter()
    room_a = build.section(conference, at(9), at(10), name="Room A")
    room_b = build.section(conference, at(9, 10), at(10), name="Room B")
    _slotted(db, build, "First", ada, room_a, make_slot(db, room_a, at(9), at(9, 20)))
    talk = build.presentation("Second", [ada])

    report = _check(db, talk, room_b)

    assert [c.type for c in report.conflicts] == [PRESENTER_TIME_CONFLICT]
    assert report.conflicts[0].conflict_time_slot.end_time == at(9, 20)


def test_gate_refuses_slot_held_by_another_talk(db, build, conference):
    ada, bob = build.presenter("Ada Lovelace"), build.presenter("Bob Smith")
    section = build.section(conference, at(9), at(10))
    slot = make_slot(db, section, at(9), at(9, 20))
    _slotted(db, build, "First", ada, section, slot)
    talk = build.presentation("Second", [bob])

    with pytest.raises(TimeSlotOccupiedError):
        assign_with_conflict_check(db, load_presentation_for_check(db, talk.id), section, time_slot=slot)

    db.expire_all()
    assert db.get(Presentation, talk.id).section_id is None


def test_gate_moves_talk_out_of_its_old_slot(db, build, conference):
    ada = build.presenter()
    section = build.section(conference, at(9), at(10))
    first = make_slot(db, section, at(9), at(9, 20), order=1)
    second = make_slot(db, section, at(9, 30), at(9, 50), order=2)
    talk = _slotted(db, build, "Talk", ada, section, first)

    assign_with_conflict_check(db, load_presentation_for_check(db, talk.id), section, time_slot=second)

    db.expire_all()
    assert db.get(TimeSlot, first.id).presentation_id is None
    assert not db.get(TimeSlot, first.id).is_occupied
    assert db.get(TimeSlot, second.id).presentation_id == talk.id


def test_summary_reports_each_double_booked_pair_once(db, build, conference):
    ada, bob = build.presenter("Ada Lovelace"), build.presenter("Bob Smith")
    morning = build.section(conference, at(9), at(10), name="Morning")
    overlap = build.section(conference, at(9, 30), at(10, 30), name="Overlap")
    later = build.section(conference, at(10, 30), at(11), name="Later")
    build.presentation("A1", [ada], section=morning)
    build.presentation("A2", [ada], section=overlap)
    build.presentation("A3", [ada], section=later)
    build.presentation("B1", [bob], section=morning)

    summary = summarize_conference_conflicts(load_conference_presentations(db, conference.id))

    assert summary.total_conflicts == 1
    assert summary.blocking_conflicts == 1
    assert summary.warning_conflicts == 0
    booking = summary.conflicts[0]
    assert booking.presenter_name == "Ada Lovelace"
    assert (booking.presentation1.title, booking.presentation2.title) == ("A1", "A2")


def test_summary_is_scoped_to_conference(db, build, organizer, conference):
    other = build.conference(organizer, name="Other Conf")
    ada = build.presenter()
    build.presentation("Here", [ada], section=build.section(conference, at(9), at(10)))
    build.presentation("There", [ada], section=build.section(other, at(9), at(10)))

    summary = summarize_conference_conflicts(load_conference_presentations(db, conference.id))

    assert summary.total_conflicts == 0
