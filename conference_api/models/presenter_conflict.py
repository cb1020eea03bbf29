from sqlalchemy import Column, Integer, String, Text, Date, DateTime, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from conference_api.database import Base

class PresenterConflict(Base):
    """Declared unavailability of a presenter, independent of any talk."""
    __tablename__ = "presenter_conflicts"

    id = Column(Integer, primary_key=True)
    presenter_id = Column(Integer, ForeignKey("presenters.id", ondelete="CASCADE"), nullable=False)

    # TIME_SLOT -> start/end, FULL_DAY -> date
    conflict_type = Column(String(20), nullable=False)
    conflict_date = Column(Date, nullable=True)
    conflict_start_time = Column(DateTime, nullable=True)
    conflict_end_time = Column(DateTime, nullable=True)
    description = Column(Text)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)

    presenter = relationship("Presenter", back_populates="conflicts")
