from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from photoalbum.models import Base


class UserRecord(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    # Display form of the name; the blob's file name carries the lowercased key.
    username = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="member")
    saved_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
