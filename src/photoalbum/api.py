"""Flat procedural surface used by front ends (GUI, CLI).

Every mutating call saves the logged-in user before returning, so a front end
never has to remember to persist anything.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, Optional

from photoalbum.config import Settings
from photoalbum.entities import Album, Photo, User
from photoalbum.errors import (
    MissingFileError,
    NotAdminError,
    NotLoggedInError,
    StoreIOError,
    UnknownAlbumError,
    UnknownPhotoError,
)
from photoalbum.lib.imagefiles import read_date_taken
from photoalbum.lib.store import UserStore
from photoalbum.services import albums as album_ops
from photoalbum.services import search as search_ops
from photoalbum.services import tags as tag_ops
from photoalbum.services.accounts import AccountManager
from photoalbum.session import UserSession, get_session

logger = logging.getLogger(__name__)

AlbumRef = Album | str
PhotoRef = Photo | str


class PhotoLibrary:
    def __init__(self, settings: Optional[Settings] = None, store: Optional[UserStore] = None,
                 session: Optional[UserSession] = None):
        self.settings = settings or Settings()
        self.store = store or UserStore(self.settings.users_dir)
        # Without an explicit session, every library in the process shares one.
        self.session = session if session is not None else get_session()
        self.accounts = AccountManager(self.store, self.settings)

    # Session
    @property
    def current_user(self) -> Optional[User]:
        return self.session.current_user

    @property
    def current_album(self) -> Optional[Album]:
        return self.session.current_album

    def login(self, username: str) -> User:
        user = self.accounts.login(username)
        self.session.set_user(user)
        return user

    def logout(self) -> None:
        self.session.clear()

    def _member(self) -> User:
        user = self.session.current_user
        if user is None or user.is_admin:
            raise NotLoggedInError("log in as a regular user first")
        return user

    def _admin(self) -> None:
        user = self.session.current_user
        if user is None or not user.is_admin:
            raise NotAdminError("only the admin can manage users")

    def save(self) -> None:
        self.store.save(self._member())

    # Accounts (admin only)
    def list_users(self) -> list[User]:
        self._admin()
        return self.accounts.list_users()

    def create_user(self, name: str) -> User:
        self._admin()
        return self.accounts.create_user(name)

    def delete_user(self, name: str) -> None:
        self._admin()
        self.accounts.delete_user(name)

    # Albums
    def albums(self) -> list[Album]:
        return list(self._member().albums)

    def _album(self, album: AlbumRef) -> Album:
        user = self._member()
        if isinstance(album, Album):
            if not user.owns(album):
                raise UnknownAlbumError(f"album '{album.name}' does not belong to {user.username}")
            return album
        return album_ops.find_album(user, album)

    def _current_or(self, album: Optional[AlbumRef]) -> Album:
        if album is not None:
            return self._album(album)
        if self.session.current_album is None:
            raise UnknownAlbumError("no album is open")
        return self._album(self.session.current_album)

    @staticmethod
    def _photo(album: Album, photo: PhotoRef) -> Photo:
        if isinstance(photo, Photo):
            index = album.index_of(photo)
            if index < 0:
                raise UnknownPhotoError(f"'{photo.filepath}' is not in album '{album.name}'")
            return album.photos[index]
        return album_ops.find_photo(album, os.path.abspath(photo))

    def _target_photo(self, photo: PhotoRef, album: Optional[AlbumRef]) -> Photo:
        if isinstance(photo, Photo) and album is None and self.session.current_album is None:
            # No album to look in: the photo must still be one of the user's own.
            user = self._member()
            if not any(p is photo for a in user.albums for p in a.photos):
                raise UnknownPhotoError(f"'{photo.filepath}' does not belong to {user.username}")
            return photo
        return self._photo(self._current_or(album), photo)

    @contextmanager
    def _mutating(self) -> Iterator[User]:
        """Yield the logged-in user and save it once the block has run.

        When the save fails, albums, photos and the open album are put back the
        way they were, so memory never shows a change the store refused.
        """
        user = self._member()
        albums = [(a, a.name, list(a.photos)) for a in user.albums]
        photos = {id(p): (p, p.caption, set(p.tags)) for a in user.albums for p in a.photos}
        current = self.session.current_album
        yield user
        try:
            self.store.save(user)
        except StoreIOError:
            user.albums = [a for a, _, _ in albums]
            for album, name, members in albums:
                album.name = name
                album.photos = members
            for photo, caption, tags in photos.values():
                photo.caption = caption
                photo.tags = tags
            self.session.set_album(current)
            logger.warning("rolled back unsaved changes for %s", user.username)
            raise

    def create_album(self, name: str) -> Album:
        with self._mutating() as user:
            album = album_ops.create_album(user, name)
        return album

    def rename_album(self, album: AlbumRef, name: str) -> Album:
        with self._mutating() as user:
            renamed = album_ops.rename_album(user, self._album(album), name)
        return renamed

    def delete_album(self, album: AlbumRef) -> None:
        with self._mutating() as user:
            target = self._album(album)
            album_ops.delete_album(user, target)
            if self.session.current_album is target:
                self.session.set_album(None)

    def open_album(self, album: AlbumRef) -> Album:
        target = self._album(album)
        self.session.set_album(target)
        return target

    # Photos
    def photos(self, album: Optional[AlbumRef] = None) -> list[Photo]:
        return list(self._current_or(album).photos)

    def add_photo(self, album: AlbumRef, filepath: str | Path, date_taken: Optional[datetime] = None,
                  caption: str = "") -> Photo:
        """Add the image at ``filepath`` to ``album``.

        Without ``date_taken`` the date comes from the file's EXIF data, else its
        modification time. Zone-aware dates are stored as local wall-clock time.
        """
        target = self._album(album)
        path = os.path.abspath(os.fspath(filepath))
        if date_taken is None:
            try:
                date_taken = read_date_taken(path)
            except OSError as exc:
                raise MissingFileError(f"cannot read '{path}': {exc}") from exc
        with self._mutating():
            photo = album_ops.add_photo(target, path, date_taken, caption)
        return photo

    def delete_photo(self, album: AlbumRef, photo: PhotoRef) -> None:
        with self._mutating():
            target = self._album(album)
            album_ops.delete_photo(target, self._photo(target, photo))

    def copy_photo(self, photo: PhotoRef, dest_name: AlbumRef, src: Optional[AlbumRef] = None) -> None:
        """Copy ``photo`` from ``src`` (default: the open album) into ``dest_name``."""
        with self._mutating():
            source = self._current_or(src)
            album_ops.copy_photo(self._photo(source, photo), source, self._album(dest_name))

    def move_photo(self, photo: PhotoRef, dest_name: AlbumRef, src: Optional[AlbumRef] = None) -> None:
        with self._mutating():
            source = self._current_or(src)
            album_ops.move_photo(self._photo(source, photo), source, self._album(dest_name))

    def set_caption(self, photo: PhotoRef, text: str, album: Optional[AlbumRef] = None) -> None:
        with self._mutating():
            album_ops.set_caption(self._target_photo(photo, album), text)

    def next_photo(self, photo: PhotoRef, album: Optional[AlbumRef] = None) -> Photo:
        target = self._current_or(album)
        return album_ops.step_photo(target, self._photo(target, photo), 1)

    def previous_photo(self, photo: PhotoRef, album: Optional[AlbumRef] = None) -> Photo:
        target = self._current_or(album)
        return album_ops.step_photo(target, self._photo(target, photo), -1)

    # Tags
    def known_tag_types(self) -> list[str]:
        return self.session.catalog.types()

    def define_tag_type(self, name: str) -> bool:
        return self.session.catalog.add_type(name)

    def add_tag(self, photo: PhotoRef, name: str, value: str, album: Optional[AlbumRef] = None) -> None:
        with self._mutating():
            target = self._target_photo(photo, album)
            tag_ops.add_tag(target, tag_ops.make_tag(name, value), self.session.catalog)

    def remove_tag(self, photo: PhotoRef, name: str, value: str, album: Optional[AlbumRef] = None) -> None:
        with self._mutating():
            target = self._target_photo(photo, album)
            tag_ops.remove_tag(target, tag_ops.make_tag(name, value))

    # Search
    def search_by_date(self, start: date, end: date, scope: Optional[AlbumRef] = None) -> list[Photo]:
        user = self._member()
        results = search_ops.search_by_date(user, start, end, self._album(scope) if scope else None)
        self.session.last_results = results
        return list(results)

    def search_by_tag(self, query: str, scope: Optional[AlbumRef] = None) -> list[Photo]:
        user = self._member()
        results = search_ops.search_by_tag(user, query, self._album(scope) if scope else None)
        self.session.last_results = results
        return list(results)

    def create_album_from_results(self, name: str) -> Album:
        with self._mutating() as user:
            album = search_ops.create_album_from_results(user, name, self.session.last_results)
        return album
