"""Album and photo edits on an in-memory User.

These functions only mutate; saving the user afterwards is the caller's job
(``PhotoLibrary`` does it after every successful call).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from photoalbum.entities import Album, Photo, User, same_name
from photoalbum.errors import (
    DuplicateAlbumNameError,
    DuplicatePhotoError,
    EmptyNameError,
    SameAlbumError,
    UnknownAlbumError,
    UnknownPhotoError,
)

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise EmptyNameError("an album name must not be empty")
    return name


def _check_unique(user: User, name: str, ignore: Album | None = None) -> None:
    for album in user.albums:
        if album is not ignore and same_name(album.name, name):
            raise DuplicateAlbumNameError(f"album '{album.name}' already exists")


def find_album(user: User, name: str) -> Album:
    album = user.get_album(name or "")
    if album is None:
        raise UnknownAlbumError(f"no album named '{name}'")
    return album


def _require_owned(user: User, album: Album) -> None:
    if not user.owns(album):
        raise UnknownAlbumError(f"album '{album.name}' does not belong to {user.username}")


def create_album(user: User, name: str, photos: Iterable[Photo] = ()) -> Album:
    """Append a new album named ``name`` holding ``photos`` (by reference, in order)."""
    name = _clean_name(name)
    _check_unique(user, name)
    album = Album(name=name)
    for photo in photos:
        # keep the one-photo-per-path invariant; first occurrence wins
        if not album.contains_path(photo.filepath):
            album.photos.append(photo)
    user.albums.append(album)
    logger.info("album '%s' created for %s", name, user.username)
    return album


def rename_album(user: User, album: Album, name: str) -> Album:
    _require_owned(user, album)
    name = _clean_name(name)
    _check_unique(user, name, ignore=album)
    old = album.name
    album.name = name
    logger.info("album '%s' renamed to '%s'", old, name)
    return album


def delete_album(user: User, album: Album) -> None:
    _require_owned(user, album)
    user.albums = [a for a in user.albums if a is not album]
    logger.info("album '%s' deleted for %s", album.name, user.username)


def find_photo(album: Album, filepath: str) -> Photo:
    for photo in album.photos:
        if photo.filepath == filepath:
            return photo
    raise UnknownPhotoError(f"'{filepath}' is not in album '{album.name}'")


def add_photo(album: Album, filepath: str, date_taken: datetime, caption: str = "") -> Photo:
    if album.contains_path(filepath):
        raise DuplicatePhotoError(f"'{filepath}' is already in album '{album.name}'")
    photo = Photo(filepath=filepath, date_taken=date_taken, caption=caption)
    album.photos.append(photo)
    return photo


def delete_photo(album: Album, photo: Photo) -> None:
    index = album.index_of(photo)
    if index < 0:
        raise UnknownPhotoError(f"'{photo.filepath}' is not in album '{album.name}'")
    del album.photos[index]


def copy_photo(photo: Photo, src: Album, dest: Album) -> None:
    """Append the same Photo object to ``dest``; ``src`` keeps it."""
    if src is dest:
        raise SameAlbumError("source and destination album are the same")
    if dest.contains_path(photo.filepath):
        raise DuplicatePhotoError(f"'{photo.filepath}' is already in album '{dest.name}'")
    dest.photos.append(photo)


def move_photo(photo: Photo, src: Album, dest: Album) -> None:
    if src is dest:
        raise SameAlbumError("source and destination album are the same")
    index = src.index_of(photo)
    if index < 0:
        raise UnknownPhotoError(f"'{photo.filepath}' is not in album '{src.name}'")
    if dest.contains_path(photo.filepath):
        raise DuplicatePhotoError(f"'{photo.filepath}' is already in album '{dest.name}'")
    moved = src.photos.pop(index)
    dest.photos.append(moved)


def set_caption(photo: Photo, text: str) -> None:
    photo.caption = text or ""


def step_photo(album: Album, photo: Photo, offset: int) -> Photo:
    """Photo ``offset`` positions away from ``photo``, wrapping around the album."""
    index = album.index_of(photo)
    if index < 0:
        raise UnknownPhotoError(f"'{photo.filepath}' is not in album '{album.name}'")
    return album.photos[(index + offset) % len(album.photos)]
