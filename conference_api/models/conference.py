from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey
from sqlalchemy.orm import relationship
from conference_api.database import Base

class Conference(Base):
    __tablename__ = "conferences"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    start_date = Column(Date)
    end_date = Column(Date)

    # organizer
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    categories = relationship("Category", back_populates="conference")
    sections = relationship("Section", back_populates="conference")
