from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from conference_api.database import Base

class PresentationAuthor(Base):
    __tablename__ = "presentation_authors"
    __table_args__ = (
        UniqueConstraint("presentation_id", "presenter_id", name="uq_presentation_presenter"),
    )

    id = Column(Integer, primary_key=True)
    presentation_id = Column(Integer, ForeignKey("presentations.id", ondelete="CASCADE"), nullable=False)
    presenter_id = Column(Integer, ForeignKey("presenters.id", ondelete="CASCADE"), nullable=False)

    is_presenter = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, default=0)

    presentation = relationship("Presentation", back_populates="authors")
    presenter = relationship("Presenter", back_populates="presentations")
