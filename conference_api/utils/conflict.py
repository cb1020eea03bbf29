# conference_api/utils/conflict.py
from datetime import date, datetime


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    """
    Half-open [start, end) intersection.
    Touching endpoints (end_a == start_b) is NOT a conflict.
    """
    return start_a < end_b and end_a > start_b


def has_window(start, end) -> bool:
    # missing bounds mean "not scheduled", never "overlaps everything"
    return start is not None and end is not None


def same_day(moment: datetime, day: date) -> bool:
    """Calendar-date match, used for FULL_DAY declared conflicts."""
    if isinstance(day, datetime):
        day = day.date()
    return moment.date() == day
