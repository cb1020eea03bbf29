from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class TimeSlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    section_id: int
    start_time: datetime
    end_time: datetime
    order: int
    slot_type: str
    is_occupied: bool
    presentation_id: Optional[int] = None

class GenerateTimeSlotsIn(BaseModel):
    # None -> settings default
    slot_duration: Optional[int] = Field(None, gt=0, description="minutes")
    break_duration: Optional[int] = Field(None, ge=0, description="minutes")
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    slot_count: Optional[int] = Field(None, gt=0)

class GenerateTimeSlotsOut(BaseModel):
    message: str
    time_slots: List[TimeSlotOut]

class AssignTimeSlotIn(BaseModel):
    presentation_id: int
    force_assign: bool = False
