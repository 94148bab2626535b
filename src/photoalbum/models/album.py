from sqlalchemy import Column, Integer, String, ForeignKey
from photoalbum.models import Base


class AlbumRecord(Base):
    __tablename__ = "albums"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False)  # order of the album in user.albums
