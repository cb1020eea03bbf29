from datetime import datetime
from typing import Dict, List, Optional, Union
from pydantic import BaseModel

class PresentationStatusIn(BaseModel):
    # validated in the router so an unknown status is a 400, not a 422
    review_status: str
    review_comments: Optional[str] = None

class BulkStatusUpdateIn(BaseModel):
    presentation_ids: List[int] = []
    review_status: str
    review_comments: Optional[str] = None

class PresentationOut(BaseModel):
    id: int
    title: str
    conference_id: Optional[int] = None
    section_id: Optional[int] = None
    review_status: str
    review_comments: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    presenters: List[str] = []

class StatusStatistics(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    revision_requested: int

class PresentationsByStatusOut(BaseModel):
    statistics: StatusStatistics
    # grouped by status, or a plain list when filtered to one status
    presentations: Union[Dict[str, List[PresentationOut]], List[PresentationOut]]
    flat: List[PresentationOut]

class StatusUpdateOut(BaseModel):
    message: str
    presentation: PresentationOut

class BulkStatusUpdateOut(BaseModel):
    message: str
    updated_count: int
    requested_count: int
