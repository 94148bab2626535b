"""Error types raised by the photo album core.

Every failure carries a discrete ``kind`` so a front end can map it to a
dialog or a message without inspecting the exception class.
"""
from __future__ import annotations


class PhotoAlbumError(Exception):
    """Base class for every failure surfaced by the core."""

    kind = "PhotoAlbum"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class EmptyNameError(PhotoAlbumError):
    kind = "EmptyName"


class InvalidNameError(PhotoAlbumError):
    kind = "InvalidName"


class DuplicateAlbumNameError(PhotoAlbumError):
    kind = "DuplicateAlbumName"


class DuplicatePhotoError(PhotoAlbumError):
    kind = "DuplicatePhoto"


class UnknownAlbumError(PhotoAlbumError):
    kind = "UnknownAlbum"


class UnknownPhotoError(PhotoAlbumError):
    kind = "UnknownPhoto"


class UnknownUserError(PhotoAlbumError):
    kind = "UnknownUser"


class DuplicateUserError(PhotoAlbumError):
    kind = "DuplicateUser"


class ReservedUserError(PhotoAlbumError):
    kind = "ReservedUser"


class SameAlbumError(PhotoAlbumError):
    kind = "SameAlbum"


class InvalidDateRangeError(PhotoAlbumError):
    kind = "InvalidDateRange"


class InvalidTagQueryError(PhotoAlbumError):
    kind = "InvalidTagQuery"


class MissingFileError(PhotoAlbumError):
    kind = "MissingFile"


class NotLoggedInError(PhotoAlbumError):
    kind = "NotLoggedIn"


class NotAdminError(PhotoAlbumError):
    kind = "NotAdmin"


class StoreIOError(PhotoAlbumError):
    """Raised when a blob cannot be written or removed.

    The underlying exception is chained as ``__cause__``.
    """

    kind = "StoreIO"
