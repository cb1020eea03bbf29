from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from conference_api.database import Base

class TimeSlot(Base):
    __tablename__ = "time_slots"

    id = Column(Integer, primary_key=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    order = Column(Integer, nullable=False)
    slot_type = Column(String(20), nullable=False, default="PRESENTATION")  # PRESENTATION / BREAK / QA

    is_occupied = Column(Boolean, nullable=False, default=False)
    presentation_id = Column(Integer, ForeignKey("presentations.id", ondelete="SET NULL"), nullable=True)

    section = relationship("Section", back_populates="time_slots")
    presentation = relationship("Presentation", back_populates="time_slots")
