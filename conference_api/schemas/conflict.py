from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel

class ConflictTimeSlot(BaseModel):
    start_time: datetime
    end_time: datetime

class ConflictDetail(BaseModel):
    type: str               # PRESENTER_TIME_CONFLICT / PRESENTER_DECLARED_CONFLICT
    severity: str           # BLOCKING / WARNING
    presenter_id: Optional[int] = None
    presenter_name: Optional[str] = None
    conflicting_presentation_id: Optional[int] = None
    conflicting_presentation: Optional[str] = None
    conflicting_category: Optional[str] = None
    conflicting_session: Optional[str] = None
    conflict_time_slot: Optional[ConflictTimeSlot] = None
    message: str
    details: Optional[dict[str, Any]] = None

class ConflictReport(BaseModel):
    has_conflicts: bool
    conflicts: List[ConflictDetail] = []
    can_proceed: bool

    @property
    def blocking(self) -> List[ConflictDetail]:
        return [c for c in self.conflicts if c.severity == "BLOCKING"]

    @property
    def warnings(self) -> List[ConflictDetail]:
        return [c for c in self.conflicts if c.severity == "WARNING"]

class CheckConflictsIn(BaseModel):
    section_id: int

class AssignWithConflictCheckIn(BaseModel):
    section_id: int
    force_assign: bool = False

class AssignmentOut(BaseModel):
    message: str
    presentation_id: int
    section_id: int
    warnings: List[ConflictDetail] = []

# ---- conference-wide summary ----

class ScheduledPresentationOut(BaseModel):
    id: int
    title: str
    section: str
    category: Optional[str] = None
    start_time: datetime
    end_time: datetime

class DoubleBookingOut(BaseModel):
    type: str = "PRESENTER_DOUBLE_BOOKING"
    severity: str = "BLOCKING"
    presenter_id: int
    presenter_name: str
    presentation1: ScheduledPresentationOut
    presentation2: ScheduledPresentationOut

class ConflictSummaryOut(BaseModel):
    total_conflicts: int
    blocking_conflicts: int
    warning_conflicts: int
    conflicts: List[DoubleBookingOut]
