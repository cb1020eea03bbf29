from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

class PresenterConflictIn(BaseModel):
    conflict_type: Literal["TIME_SLOT", "FULL_DAY"]
    conflict_date: Optional[date] = None
    conflict_start_time: Optional[datetime] = None
    conflict_end_time: Optional[datetime] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def _check_window(self):
        if self.conflict_type == "TIME_SLOT":
            if self.conflict_start_time is None or self.conflict_end_time is None:
                raise ValueError("TIME_SLOT conflicts need conflict_start_time and conflict_end_time")
            if self.conflict_end_time <= self.conflict_start_time:
                raise ValueError("conflict_end_time must be after conflict_start_time")
        elif self.conflict_date is None:
            raise ValueError("FULL_DAY conflicts need conflict_date")
        return self

class PresenterConflictOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    presenter_id: int
    conflict_type: str
    conflict_date: Optional[date] = None
    conflict_start_time: Optional[datetime] = None
    conflict_end_time: Optional[datetime] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

class AssignedSectionOut(BaseModel):
    id: int
    name: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

class PresentingOut(BaseModel):
    presentation_id: int
    title: str
    section: Optional[AssignedSectionOut] = None

class ConferencePresenterOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    affiliation: Optional[str] = None
    presentations: List[PresentingOut] = []
    conflicts: List[PresenterConflictOut] = []
    presentation_count: int
    conflict_count: int

class PresenterIn(BaseModel):
    user_id: Optional[int] = None
    name: str = Field(min_length=1)
    email: Optional[str] = None
    bio: Optional[str] = None
    affiliation: Optional[str] = None

class PresenterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    name: str
    email: Optional[str] = None
    bio: Optional[str] = None
    affiliation: Optional[str] = None
