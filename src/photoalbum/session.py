"""Process-wide session state: the logged-in user and the album being viewed.

Entities never reach for the session; callers pass it around explicitly and
tests build isolated ``UserSession`` instances.
"""
from __future__ import annotations

from typing import Iterable, Mapping, Optional

from photoalbum.entities import Album, Photo, TagPolicy, User
from photoalbum.services.tags import DEFAULT_TAG_TYPES, TagCatalog


class UserSession:
    def __init__(self, tag_types: Iterable[str] = DEFAULT_TAG_TYPES,
                 tag_policies: Optional[Mapping[str, TagPolicy]] = None):
        self._tag_types = tuple(tag_types)
        self._tag_policies = tag_policies
        self._user: Optional[User] = None
        self._album: Optional[Album] = None
        self.last_results: list[Photo] = []
        self.catalog = TagCatalog(self._tag_types, self._tag_policies)

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def current_album(self) -> Optional[Album]:
        return self._album

    def set_user(self, user: Optional[User]) -> None:
        """Bind ``user``; the current album, last results and tag catalog start over."""
        self._user = user
        self._album = None
        self.last_results = []
        self.catalog = TagCatalog(self._tag_types, self._tag_policies)

    def set_album(self, album: Optional[Album]) -> None:
        self._album = album

    def clear(self) -> None:
        self.set_user(None)


_session: Optional[UserSession] = None


def init_session(**kwargs) -> UserSession:
    """Replace the process-wide session with a fresh one."""
    global _session
    _session = UserSession(**kwargs)
    return _session


def get_session() -> UserSession:
    global _session
    if _session is None:
        _session = UserSession()
    return _session


def clear_session() -> None:
    if _session is not None:
        _session.clear()
