from datetime import datetime, timedelta
from typing import List, Optional, Tuple


def generate_time_slots(
    start: datetime,
    end: datetime,
    slot_minutes: int = 20,
    break_minutes: int = 10,
    slot_count: Optional[int] = None,
) -> List[Tuple[int, datetime, datetime]]:
    """
    Cut a section window into presentation slots separated by breaks.

    slot_count given -> exactly that many slots starting at `start` (may run past `end`)
    otherwise        -> fill [start, end), a slot that would end after `end` is dropped

    returns [(order, slot_start, slot_end), ...], order starts at 1
    """
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")
    if break_minutes < 0:
        raise ValueError("break_minutes must not be negative")

    slot = timedelta(minutes=slot_minutes)
    gap = timedelta(minutes=break_minutes)

    out = []
    current = start

    if slot_count:
        for i in range(slot_count):
            out.append((i + 1, current, current + slot))
            current = current + slot + gap
        return out

    while current < end:
        slot_end = current + slot
        if slot_end > end:
            break
        out.append((len(out) + 1, current, slot_end))
        current = slot_end + gap
    return out
