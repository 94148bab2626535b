"""Per-user persistence: one SQLite blob per user under the users directory.

Each blob is a complete, self-contained database holding the object graph of a
single user. Writes build the blob in a temp file next to the target and move
it into place with ``os.replace``; readers therefore see either the old or the
new blob, never a partial one.
"""
from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections import defaultdict
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from photoalbum.entities import Album, Photo, Role, Tag, User
from photoalbum.errors import EmptyNameError, InvalidNameError, StoreIOError
from photoalbum.lib.database import (
    get_engine,
    get_sessionmaker,
    has_sqlite_header,
    init_db,
    read_format_version,
    write_format_version,
)
from photoalbum.models import AlbumPhoto, AlbumRecord, PhotoRecord, TagRecord, UserRecord

logger = logging.getLogger(__name__)

STORE_VERSION = 1
BLOB_SUFFIX = ".dat"


def validate_key(key: str) -> str:
    """Return the normalized key, rejecting anything that is not a plain file stem."""
    if key is None or not key.strip():
        raise EmptyNameError("a user name must not be empty")
    key = key.strip().lower()
    if key.startswith(".") or "/" in key or "\\" in key or os.sep in key or "\x00" in key:
        raise InvalidNameError(f"'{key}' cannot be used as a user name")
    return key


class UserStore:
    """Durable per-user state, addressed by the lowercased username."""

    def __init__(self, users_dir: str | Path):
        self.users_dir = Path(users_dir)
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[key]

    def path_for(self, key: str) -> Path:
        return self.users_dir / f"{validate_key(key)}{BLOB_SUFFIX}"

    def ensure_dir(self) -> None:
        """Create the users directory if missing.

        Raises:
            StoreIOError: if the directory cannot be created
        """
        try:
            self.users_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("cannot create users directory %s", self.users_dir, exc_info=True)
            raise StoreIOError(f"cannot create {self.users_dir}: {exc}") from exc

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def keys(self) -> list[str]:
        """Sorted keys of every stored blob."""
        if not self.users_dir.is_dir():
            return []
        return sorted(p.stem for p in self.users_dir.glob(f"*{BLOB_SUFFIX}")
                      if p.is_file() and not p.name.startswith("."))

    # Writing
    def save(self, user: User, key: Optional[str] = None) -> Path:
        """Write the complete object graph of ``user`` as the blob for ``key``.

        Raises:
            StoreIOError: if the blob cannot be written; the previous blob is left intact
        """
        key = validate_key(key or user.username)
        target = self.path_for(key)
        with self._lock_for(key):
            self.ensure_dir()
            tmp: Optional[Path] = None
            try:
                fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.users_dir)
                os.close(fd)
                tmp = Path(tmp_name)
                self._write_blob(user, tmp)
                os.replace(tmp, target)
            except (OSError, SQLAlchemyError) as exc:
                logger.error("failed to save user '%s' to %s", user.username, target, exc_info=True)
                if tmp is not None:
                    try:
                        tmp.unlink()
                    except FileNotFoundError:
                        pass
                    except OSError:
                        logger.warning("could not remove temp file %s", tmp)
                raise StoreIOError(f"could not save user '{user.username}': {exc}") from exc
        logger.debug("saved user '%s' to %s", user.username, target)
        return target

    def _write_blob(self, user: User, path: Path) -> None:
        engine = get_engine(str(path))
        try:
            init_db(engine)
            Session = get_sessionmaker(engine)
            with Session() as session:
                user_row = UserRecord(username=user.username, role=user.role.value)
                session.add(user_row)
                session.flush()

                # Photo rows are keyed by object identity so shared references survive.
                photo_ids: dict[int, int] = {}
                for position, album in enumerate(user.albums):
                    album_row = AlbumRecord(user_id=user_row.id, name=album.name, position=position)
                    session.add(album_row)
                    session.flush()
                    for photo_position, photo in enumerate(album.photos):
                        photo_id = photo_ids.get(id(photo))
                        if photo_id is None:
                            photo_row = PhotoRecord(filepath=photo.filepath, caption=photo.caption,
                                                    taken_at=photo.date_taken)
                            session.add(photo_row)
                            session.flush()
                            photo_id = photo_ids[id(photo)] = photo_row.id
                            session.add_all(TagRecord(photo_id=photo_id, name=t.name, value=t.value)
                                            for t in photo.tags)
                        session.add(AlbumPhoto(album_id=album_row.id, photo_id=photo_id,
                                               position=photo_position))
                session.commit()
            write_format_version(engine, STORE_VERSION)
        finally:
            engine.dispose()

    # Reading
    def load(self, key: str) -> Optional[User]:
        """Load the user stored under ``key``.

        Returns None when no blob exists, and also (after logging why) when the
        blob is corrupt, unreadable or written by an incompatible version.
        """
        key = validate_key(key)
        path = self.path_for(key)
        with self._lock_for(key):
            if not path.is_file():
                logger.debug("no saved data for '%s' at %s", key, path)
                return None
            try:
                if not has_sqlite_header(path):
                    logger.warning("refusing %s: not a user blob", path)
                    return None
                return self._read_blob(path)
            except (OSError, SQLAlchemyError, ValueError) as exc:
                logger.warning("could not load user blob %s: %s", path, exc, exc_info=True)
                return None

    def _read_blob(self, path: Path) -> Optional[User]:
        engine = get_engine(str(path), read_only=True)
        try:
            version = read_format_version(engine)
            if version != STORE_VERSION:
                logger.warning("refusing %s: format version %s, expected %s", path, version, STORE_VERSION)
                return None
            Session = get_sessionmaker(engine)
            with Session() as session:
                user_row = session.query(UserRecord).order_by(UserRecord.id).first()
                if user_row is None:
                    logger.warning("refusing %s: blob holds no user", path)
                    return None

                tags_by_photo: dict[int, set[Tag]] = defaultdict(set)
                for row in session.query(TagRecord).order_by(TagRecord.id):
                    tags_by_photo[row.photo_id].add(Tag(row.name, row.value))

                photos = {
                    row.id: Photo(filepath=row.filepath, date_taken=row.taken_at,
                                  caption=row.caption or "", tags=tags_by_photo.get(row.id, set()))
                    for row in session.query(PhotoRecord)
                }

                members: dict[int, list[Photo]] = defaultdict(list)
                for row in session.query(AlbumPhoto).order_by(AlbumPhoto.album_id, AlbumPhoto.position):
                    members[row.album_id].append(photos[row.photo_id])

                albums = [
                    Album(name=row.name, photos=members.get(row.id, []))
                    for row in (session.query(AlbumRecord)
                                .filter_by(user_id=user_row.id)
                                .order_by(AlbumRecord.position))
                ]
                return User(username=user_row.username, role=Role(user_row.role), albums=albums)
        except KeyError as exc:
            raise ValueError(f"dangling photo reference {exc}") from exc
        finally:
            engine.dispose()

    # Removal
    def delete(self, key: str) -> bool:
        """Remove the blob for ``key``. Returns False if there was none.

        Raises:
            StoreIOError: if the blob exists but cannot be removed
        """
        key = validate_key(key)
        path = self.path_for(key)
        with self._lock_for(key):
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                logger.error("failed to delete %s", path, exc_info=True)
                raise StoreIOError(f"could not delete user '{key}': {exc}") from exc
        logger.debug("deleted %s", path)
        return True
