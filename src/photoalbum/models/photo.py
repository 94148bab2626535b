from sqlalchemy import Column, Integer, String, Text, DateTime
from photoalbum.models import Base


class PhotoRecord(Base):
    """One row per distinct Photo object of the user.

    A photo shared by several albums is written once and referenced from
    ``album_photos``, so loading restores the shared reference.
    """
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True)
    filepath = Column(String(1024), nullable=False, index=True)
    caption = Column(Text, nullable=False, default="")
    # Naive local time of the host, as taken from the file or given by the caller.
    taken_at = Column(DateTime, nullable=False)
