"""Date-range and tag-expression search over a user's albums.

Tag queries follow a deliberately small grammar::

    query := term (OP term)?
    term  := name "=" value
    OP    := " AND " | " OR "

Operators are case-sensitive; names and values are trimmed and compared
case-insensitively, like tags themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional

from photoalbum.entities import Album, Photo, Tag, User
from photoalbum.errors import InvalidDateRangeError, InvalidTagQueryError
from photoalbum.services.albums import create_album, find_album

AND = " AND "
OR = " OR "


@dataclass(frozen=True)
class TagQuery:
    terms: tuple[Tag, ...]
    operator: Optional[str] = None  # "AND", "OR" or None for a single term

    def matches(self, photo: Photo) -> bool:
        if self.operator == "OR":
            return any(t in photo.tags for t in self.terms)
        return all(t in photo.tags for t in self.terms)

    def __str__(self) -> str:
        sep = f" {self.operator} " if self.operator else ""
        return sep.join(str(t) for t in self.terms)


def _parse_term(text: str, query: str) -> Tag:
    if AND in text or OR in text:
        raise InvalidTagQueryError(f"too many terms in '{query}'; at most two are allowed")
    parts = text.split("=")
    if len(parts) != 2:
        raise InvalidTagQueryError(f"invalid term '{text.strip()}'; use name=value")
    name, value = parts[0].strip(), parts[1].strip()
    if not name or not value:
        raise InvalidTagQueryError(f"invalid term '{text.strip()}'; name and value must not be empty")
    return Tag(name, value)


def parse_tag_query(query: str) -> TagQuery:
    """Parse ``name=value`` optionally joined to a second term by AND or OR.

    Raises:
        InvalidTagQueryError: for any other shape
    """
    text = (query or "").strip()
    if not text:
        raise InvalidTagQueryError("empty tag query")
    for op in (AND, OR):
        if op in text:
            left, right = text.split(op, 1)
            return TagQuery((_parse_term(left, text), _parse_term(right, text)), op.strip())
    return TagQuery((_parse_term(text, text),))


def scope_albums(user: User, scope: Optional[str | Album] = None) -> list[Album]:
    """Albums inspected by a search: the named one, or every album when scope is None."""
    if scope is None:
        return list(user.albums)
    if isinstance(scope, Album):
        return [scope]
    return [find_album(user, scope)]


def _collect(albums: Iterable[Album], predicate: Callable[[Photo], bool]) -> list[Photo]:
    # A photo may sit in several albums; report each distinct photo once, first-seen order.
    seen: set[tuple] = set()
    results: list[Photo] = []
    for album in albums:
        for photo in album.photos:
            key = photo.identity()
            if key in seen or not predicate(photo):
                continue
            seen.add(key)
            results.append(photo)
    return results


def search_by_date(user: User, start: date, end: date, scope: Optional[str | Album] = None) -> list[Photo]:
    """Photos taken between the start of ``start`` and the end of ``end``, inclusive."""
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    if start > end:
        raise InvalidDateRangeError(f"start date {start} is after end date {end}")
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end, time.max)
    return _collect(scope_albums(user, scope), lambda p: lower <= p.date_taken <= upper)


def search_by_tag(user: User, query: str | TagQuery, scope: Optional[str | Album] = None) -> list[Photo]:
    parsed = query if isinstance(query, TagQuery) else parse_tag_query(query)
    return _collect(scope_albums(user, scope), parsed.matches)


def create_album_from_results(user: User, name: str, photos: Iterable[Photo]) -> Album:
    """Promote a search result to a new album sharing the same Photo objects."""
    return create_album(user, name, photos)
