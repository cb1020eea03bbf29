from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from conference_api.database import Base

class Presenter(Base):
    __tablename__ = "presenters"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255))
    affiliation = Column(String(255))
    bio = Column(Text)

    presentations = relationship("PresentationAuthor", back_populates="presenter")
    conflicts = relationship(
        "PresenterConflict",
        back_populates="presenter",
        order_by="PresenterConflict.created_at.desc()",
        cascade="all, delete-orphan",
    )
