from sqlalchemy import Column, Integer, String, TIMESTAMP
from datetime import datetime
from conference_api.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    # admin / organizer / presenter / attendee
    role = Column(String(20), nullable=False, default="attendee")
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
