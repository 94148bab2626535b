from __future__ import annotations

from typing import Iterable, Mapping, Optional

from photoalbum.entities import DEFAULT_TAG_POLICIES, Photo, Tag, TagPolicy, policy_for
from photoalbum.errors import EmptyNameError

DEFAULT_TAG_TYPES = ("location", "person")


class TagCatalog:
    """Known tag types of one session, with their single/multi value policy.

    The catalog only lives as long as the session; it is rebuilt from
    settings on every login.
    """

    def __init__(self, types: Iterable[str] = DEFAULT_TAG_TYPES,
                 policies: Optional[Mapping[str, TagPolicy]] = None):
        self.policies: dict[str, TagPolicy] = dict(DEFAULT_TAG_POLICIES if policies is None else policies)
        self._types: dict[str, str] = {}
        for name in types:
            self.add_type(name)

    def types(self) -> list[str]:
        return sorted(self._types.values(), key=str.lower)

    def add_type(self, name: str) -> bool:
        """Register a tag type; returns False if it was already known."""
        name = (name or "").strip()
        if not name:
            raise EmptyNameError("a tag type must not be empty")
        if name.lower() in self._types:
            return False
        self._types[name.lower()] = name
        return True

    def policy(self, name: str) -> TagPolicy:
        return policy_for(name, self.policies)


def make_tag(name: str, value: str) -> Tag:
    name = (name or "").strip()
    value = (value or "").strip()
    if not name:
        raise EmptyNameError("a tag name must not be empty")
    if not value:
        raise EmptyNameError("a tag value must not be empty")
    return Tag(name, value)


def add_tag(photo: Photo, tag: Tag, catalog: Optional[TagCatalog] = None) -> None:
    """Attach ``tag`` to ``photo``, honouring single-valued tag types.

    Unknown tag types are added to the catalog.
    """
    catalog = catalog or TagCatalog()
    catalog.add_type(tag.name)
    photo.add_tag(tag, catalog.policies)


def remove_tag(photo: Photo, tag: Tag) -> None:
    photo.remove_tag(tag)
