from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .user import UserRecord  # noqa: F401
from .album import AlbumRecord  # noqa: F401
from .photo import PhotoRecord  # noqa: F401
from .albumphoto import AlbumPhoto  # noqa: F401
from .tag import TagRecord  # noqa: F401
