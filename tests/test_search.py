from datetime import date, datetime

import pytest

from photoalbum.entities import Album, Photo, Tag, User
from photoalbum.errors import (
    DuplicateAlbumNameError,
    InvalidDateRangeError,
    InvalidTagQueryError,
    UnknownAlbumError,
)
from photoalbum.services.search import (
    create_album_from_results,
    parse_tag_query,
    search_by_date,
    search_by_tag,
)


def tagged(path, when=datetime(2024, 6, 1, 12, 0), **tags):
    p = Photo(path, when)
    for name, value in tags.items():
        p.add_tag(Tag(name, value))
    return p


def make_user():
    paris = tagged("/img/paris.jpg", person="alice", location="paris")
    rome = tagged("/img/rome.jpg", datetime(2024, 7, 1), person="bob", location="rome")
    plain = tagged("/img/plain.jpg", datetime(2023, 1, 1))
    return User("alice", albums=[Album("trip", [paris, rome]), Album("misc", [plain, paris])])


def test_parse_tag_query_shapes():
    q = parse_tag_query("  person = alice ")
    assert q.terms == (Tag("person", "alice"),) and q.operator is None
    q = parse_tag_query("person=alice AND location=paris")
    assert q.operator == "AND" and len(q.terms) == 2
    q = parse_tag_query("person=bob OR location=paris")
    assert q.operator == "OR"
    assert str(q) == "person=bob OR location=paris"


@pytest.mark.parametrize("query", [
    "",
    "person",
    "person=",
    "=alice",
    "a=b=c",
    "person=alice AND location=paris AND X=Y",
    "person=alice OR location=paris AND X=Y",
    "person=alice AND location=paris OR X=Y",
    "person=alice and location=paris",
])
def test_parse_tag_query_rejects_bad_input(query):
    with pytest.raises(InvalidTagQueryError):
        parse_tag_query(query)


def test_tag_and_or():
    user = make_user()
    paris = user.albums[0].photos[0]
    assert search_by_tag(user, "person=alice AND location=paris") == [paris]
    assert search_by_tag(user, "person=alice AND location=rome") == []
    assert search_by_tag(user, "person=bob OR location=paris") == [paris, user.albums[0].photos[1]]
    assert search_by_tag(user, "PERSON=Alice") == [paris]


def test_search_reports_a_shared_photo_once():
    user = make_user()
    results = search_by_tag(user, "location=paris")
    assert len(results) == 1


def test_search_dedups_structurally_equal_photos():
    a = tagged("/img/x.jpg", person="alice")
    b = tagged("/img/x.jpg", person="alice")
    user = User("u", albums=[Album("one", [a]), Album("two", [b])])
    assert search_by_tag(user, "person=alice") == [a]


def test_search_scope():
    user = make_user()
    assert search_by_tag(user, "person=bob", "misc") == []
    assert len(search_by_tag(user, "person=bob", "TRIP")) == 1
    with pytest.raises(UnknownAlbumError):
        search_by_tag(user, "person=bob", "nowhere")


def test_date_range_is_inclusive():
    start = Photo("/img/start.jpg", datetime(2024, 6, 1, 0, 0, 0))
    end = Photo("/img/end.jpg", datetime(2024, 6, 2, 23, 59, 59))
    before = Photo("/img/before.jpg", datetime(2024, 5, 31, 23, 59, 59))
    after = Photo("/img/after.jpg", datetime(2024, 6, 3, 0, 0, 0))
    user = User("u", albums=[Album("all", [before, start, end, after])])
    assert search_by_date(user, date(2024, 6, 1), date(2024, 6, 2)) == [start, end]
    assert search_by_date(user, date(2024, 6, 1), date(2024, 6, 1)) == [start]


def test_date_range_rejects_reversed_bounds():
    with pytest.raises(InvalidDateRangeError):
        search_by_date(make_user(), date(2024, 6, 2), date(2024, 6, 1))


def test_results_become_an_album_sharing_photos():
    user = make_user()
    results = search_by_date(user, date(2024, 1, 1), date(2024, 12, 31))
    album = create_album_from_results(user, "2024", results)
    assert album.photos == results
    assert album.photos[0] is results[0]

    results[0].caption = "edited"
    assert user.albums[0].photos[0].caption == "edited"

    with pytest.raises(DuplicateAlbumNameError):
        create_album_from_results(user, "trip", results)


def test_results_album_keeps_one_photo_per_path():
    a = tagged("/img/x.jpg", person="alice")
    b = Photo("/img/x.jpg", a.date_taken, caption="different")
    user = User("u")
    album = create_album_from_results(user, "dupes", [a, b])
    assert album.photos == [a]
