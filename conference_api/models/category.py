from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from conference_api.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    conference_id = Column(Integer, ForeignKey("conferences.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    order = Column(Integer, default=0)

    conference = relationship("Conference", back_populates="categories")
    sections = relationship("Section", back_populates="category")
