from datetime import datetime

import pytest

from photoalbum.entities import Album, Photo, User
from photoalbum.errors import (
    DuplicateAlbumNameError,
    DuplicatePhotoError,
    EmptyNameError,
    SameAlbumError,
    UnknownAlbumError,
    UnknownPhotoError,
)
from photoalbum.services import albums as ops

WHEN = datetime(2024, 6, 1, 10, 0)


def test_create_album_enforces_unique_non_empty_names():
    user = User("alice")
    ops.create_album(user, " trip ")
    assert [a.name for a in user.albums] == ["trip"]
    with pytest.raises(DuplicateAlbumNameError):
        ops.create_album(user, "TRIP")
    with pytest.raises(EmptyNameError):
        ops.create_album(user, "  ")


def test_rename_album():
    user = User("alice")
    trip = ops.create_album(user, "trip")
    ops.create_album(user, "home")

    ops.rename_album(user, trip, "Trip")  # only the case changes
    assert trip.name == "Trip"
    with pytest.raises(DuplicateAlbumNameError):
        ops.rename_album(user, trip, "HOME")
    with pytest.raises(EmptyNameError):
        ops.rename_album(user, trip, "")
    with pytest.raises(UnknownAlbumError):
        ops.rename_album(user, Album("stranger"), "x")


def test_delete_album_only_drops_references():
    user = User("alice")
    trip = ops.create_album(user, "trip")
    best = ops.create_album(user, "best")
    photo = ops.add_photo(trip, "/img/a.jpg", WHEN)
    ops.copy_photo(photo, trip, best)

    ops.delete_album(user, trip)
    assert [a.name for a in user.albums] == ["best"]
    assert best.photos == [photo]
    with pytest.raises(UnknownAlbumError):
        ops.delete_album(user, trip)


def test_add_and_delete_photo():
    album = Album("trip")
    photo = ops.add_photo(album, "/img/a.jpg", WHEN)
    assert photo.caption == ""
    with pytest.raises(DuplicatePhotoError):
        ops.add_photo(album, "/img/a.jpg", datetime(2020, 1, 1))

    ops.delete_photo(album, photo)
    assert album.photos == []
    with pytest.raises(UnknownPhotoError):
        ops.delete_photo(album, photo)


def test_move_is_not_copy():
    src, dest, other = Album("src"), Album("dest"), Album("other")
    p = ops.add_photo(src, "/img/a.jpg", WHEN)

    ops.copy_photo(p, src, other)
    assert p in src.photos and other.photos[0] is p

    ops.move_photo(p, src, dest)
    assert src.photos == []
    assert dest.photos[0] is p
    assert other.photos[0] is p


def test_copy_and_move_errors():
    src, dest = Album("src"), Album("dest")
    p = ops.add_photo(src, "/img/a.jpg", WHEN)
    ops.add_photo(dest, "/img/a.jpg", WHEN)

    with pytest.raises(SameAlbumError):
        ops.copy_photo(p, src, src)
    with pytest.raises(SameAlbumError):
        ops.move_photo(p, src, src)
    with pytest.raises(DuplicatePhotoError):
        ops.copy_photo(p, src, dest)
    with pytest.raises(DuplicatePhotoError):
        ops.move_photo(p, src, dest)
    assert src.photos == [p]  # failed move leaves the source untouched
    with pytest.raises(UnknownPhotoError):
        ops.move_photo(Photo("/img/zzz.jpg", WHEN), src, Album("third"))


def test_shared_photo_edits_are_visible_everywhere():
    a, b = Album("a"), Album("b")
    p = ops.add_photo(a, "/img/a.jpg", WHEN)
    ops.copy_photo(p, a, b)
    ops.set_caption(p, "sunset")
    assert b.photos[0].caption == "sunset"


def test_find_helpers():
    user = User("alice")
    trip = ops.create_album(user, "trip")
    p = ops.add_photo(trip, "/img/a.jpg", WHEN)
    assert ops.find_album(user, "TRIP") is trip
    assert ops.find_photo(trip, "/img/a.jpg") is p
    with pytest.raises(UnknownAlbumError):
        ops.find_album(user, "nope")
    with pytest.raises(UnknownPhotoError):
        ops.find_photo(trip, "/img/b.jpg")


def test_step_photo_wraps_around():
    album = Album("slides")
    first = ops.add_photo(album, "/img/1.jpg", WHEN)
    second = ops.add_photo(album, "/img/2.jpg", WHEN)
    third = ops.add_photo(album, "/img/3.jpg", WHEN)
    assert ops.step_photo(album, first, 1) is second
    assert ops.step_photo(album, third, 1) is first
    assert ops.step_photo(album, first, -1) is third
