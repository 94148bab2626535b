from sqlalchemy import Column, Integer, String, ForeignKey
from photoalbum.models import Base


class TagRecord(Base):
    __tablename__ = "photo_tags"

    id = Column(Integer, primary_key=True)
    photo_id = Column(Integer, ForeignKey("photos.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    value = Column(String(255), nullable=False)
