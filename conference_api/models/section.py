from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from conference_api.database import Base

class Section(Base):
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True)
    conference_id = Column(Integer, ForeignKey("conferences.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    name = Column(String(255), nullable=False)
    type = Column(String(30), default="PRESENTATION")
    room = Column(String(100))

    # unscheduled sections have neither
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)

    order = Column(Integer, default=0)

    conference = relationship("Conference", back_populates="sections")
    category = relationship("Category", back_populates="sections")
    presentations = relationship("Presentation", back_populates="section")
    time_slots = relationship(
        "TimeSlot",
        back_populates="section",
        order_by="TimeSlot.order",
        cascade="all, delete-orphan",
    )
