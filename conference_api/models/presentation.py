from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from conference_api.database import Base

REVIEW_STATUSES = ("PENDING", "APPROVED", "REJECTED", "REVISION_REQUESTED")

# rejected talks never hold a presenter's time
INACTIVE_REVIEW_STATUSES = ("REJECTED",)

class Presentation(Base):
    __tablename__ = "presentations"

    id = Column(Integer, primary_key=True)
    # submission target, may be empty for talks created straight into a section
    conference_id = Column(Integer, ForeignKey("conferences.id", ondelete="CASCADE"), nullable=True)

    title = Column(String(500), nullable=False)
    abstract = Column(Text)
    duration = Column(Integer)  # minutes

    review_status = Column(String(20), nullable=False, default="PENDING")
    review_comments = Column(Text)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    order = Column(Integer, default=0)

    conference = relationship("Conference")
    section = relationship("Section", back_populates="presentations")
    authors = relationship(
        "PresentationAuthor",
        back_populates="presentation",
        order_by="PresentationAuthor.order",
        cascade="all, delete-orphan",
    )
    time_slots = relationship("TimeSlot", back_populates="presentation")
