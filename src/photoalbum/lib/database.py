from pathlib import Path
from urllib.parse import quote

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

# Every valid SQLite file starts with this 16-byte magic string.
SQLITE_HEADER = b"SQLite format 3\x00"


def get_engine(url: str | None = None, read_only: bool = False):
    """Create a SQLAlchemy engine. Defaults to in-memory SQLite when url is None."""
    url = url or "sqlite:///:memory:"
    url = normalize_db_url(url, read_only=read_only)
    engine = create_engine(url, echo=False, future=True)
    return engine


def normalize_db_url(value: str, read_only: bool = False) -> str:
    """Turn a filesystem path into a SQLite URL.

    - If value already looks like a URL (contains '://'), return as-is.
    - Otherwise treat it as a path to a SQLite file. With ``read_only`` the
      file is opened through a ``mode=ro`` URI so nothing can be written.
    """
    if not value or "://" in value:
        return value

    posix = Path(value).resolve().as_posix()
    if read_only:
        return f"sqlite:///file:{quote(posix)}?mode=ro&uri=true"
    return f"sqlite:///{posix}"


def get_sessionmaker(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine):
    """Create all tables using metadata from the models package."""
    # Import models lazily to avoid circular imports at package import time
    from photoalbum.models import Base

    Base.metadata.create_all(engine)


def read_format_version(engine) -> int:
    """Return the format version stored in the SQLite header (``user_version``)."""
    with engine.connect() as conn:
        return int(conn.execute(text("PRAGMA user_version")).scalar() or 0)


def write_format_version(engine, version: int) -> None:
    # PRAGMA does not accept bound parameters.
    with engine.begin() as conn:
        conn.execute(text(f"PRAGMA user_version = {int(version)}"))


def has_sqlite_header(path: str | Path) -> bool:
    """Cheap check that a file is a SQLite database before handing it to the driver."""
    with Path(path).open("rb") as fh:
        return fh.read(len(SQLITE_HEADER)) == SQLITE_HEADER


class InMemoryAdapter:
    """Lightweight in-memory DB adapter for tests.

    Usage:
        adapter = InMemoryAdapter()
        session = adapter.session()
    """

    def __init__(self):
        self.engine = get_engine("sqlite:///:memory:")
        self.Session = get_sessionmaker(self.engine)
        init_db(self.engine)

    def session(self):
        return self.Session()
