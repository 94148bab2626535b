from sqlalchemy import Column, Integer, ForeignKey
from photoalbum.models import Base


class AlbumPhoto(Base):
    __tablename__ = "album_photos"

    id = Column(Integer, primary_key=True)
    album_id = Column(Integer, ForeignKey("albums.id"), nullable=False, index=True)
    photo_id = Column(Integer, ForeignKey("photos.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # insertion order within the album
