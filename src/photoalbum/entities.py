"""In-memory entities: Tag, Photo, Album and User.

These are plain dataclasses; the ORM records in ``photoalbum.models`` only
exist while a user blob is being written or read.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

RESERVED_ADMIN = "admin"
RESERVED_STOCK = "stock"
RESERVED_USERNAMES = frozenset({RESERVED_ADMIN, RESERVED_STOCK})

STOCK_ALBUM_NAME = "stock"


class Role(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class TagPolicy(str, enum.Enum):
    """How many values of one tag type a photo may carry."""

    SINGLE = "single"
    MULTI = "multi"


DEFAULT_TAG_POLICIES: dict[str, TagPolicy] = {"location": TagPolicy.SINGLE}


def same_name(a: str, b: str) -> bool:
    return a.lower() == b.lower()


@dataclass(frozen=True, eq=False)
class Tag:
    name: str
    value: str

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return same_name(self.name, other.name) and same_name(self.value, other.value)

    def __hash__(self) -> int:
        return hash((self.name.lower(), self.value.lower()))

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


def local_datetime(value: datetime) -> datetime:
    """``value`` as a naive local date-time; aware values are converted to local time first."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


@dataclass(eq=False)
class Photo:
    filepath: str
    date_taken: datetime
    caption: str = ""
    tags: set[Tag] = field(default_factory=set)

    # Structural equality over a mutable object: photos are deliberately unhashable.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self):
        # Capture dates are local wall-clock times with no zone.
        self.date_taken = local_datetime(self.date_taken)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Photo):
            return NotImplemented
        return (
            self.filepath == other.filepath
            and self.caption == other.caption
            and self.date_taken == other.date_taken
            and self.tags == other.tags
        )

    def identity(self) -> tuple:
        """Hashable snapshot of the structural identity of this photo."""
        return (self.filepath, self.caption, self.date_taken, frozenset(self.tags))

    def add_tag(self, tag: Tag, policies: Optional[Mapping[str, TagPolicy]] = None) -> None:
        """Attach ``tag``; a single-valued tag type replaces its previous value."""
        policies = DEFAULT_TAG_POLICIES if policies is None else policies
        if policy_for(tag.name, policies) is TagPolicy.SINGLE:
            self.tags = {t for t in self.tags if not same_name(t.name, tag.name)}
        self.tags.add(tag)

    def remove_tag(self, tag: Tag) -> None:
        self.tags.discard(tag)

    def tags_named(self, name: str) -> list[Tag]:
        return sorted((t for t in self.tags if same_name(t.name, name)), key=lambda t: t.value.lower())


def policy_for(name: str, policies: Mapping[str, TagPolicy]) -> TagPolicy:
    for key, policy in policies.items():
        if same_name(key, name):
            return policy
    return TagPolicy.MULTI


@dataclass
class Album:
    name: str
    photos: list[Photo] = field(default_factory=list)

    @property
    def photo_count(self) -> int:
        return len(self.photos)

    @property
    def date_range(self) -> Optional[tuple[datetime, datetime]]:
        """(earliest, latest) ``date_taken`` of the album, or None when empty."""
        if not self.photos:
            return None
        dates = [p.date_taken for p in self.photos]
        return min(dates), max(dates)

    def contains_path(self, filepath: str) -> bool:
        return any(p.filepath == filepath for p in self.photos)

    def index_of(self, photo: Photo) -> int:
        """Position of ``photo`` by reference, falling back to its filepath; -1 if absent."""
        for i, p in enumerate(self.photos):
            if p is photo:
                return i
        for i, p in enumerate(self.photos):
            if p.filepath == photo.filepath:
                return i
        return -1


@dataclass
class User:
    username: str
    role: Role = Role.MEMBER
    albums: list[Album] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.username.lower()

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def get_album(self, name: str) -> Optional[Album]:
        for album in self.albums:
            if same_name(album.name, name.strip()):
                return album
        return None

    def owns(self, album: Album) -> bool:
        return any(a is album for a in self.albums)


def is_reserved(username: str) -> bool:
    return username.strip().lower() in RESERVED_USERNAMES
