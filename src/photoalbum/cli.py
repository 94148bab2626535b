import argparse
from datetime import date, datetime
from typing import Iterable, Optional

from photoalbum.api import PhotoLibrary
from photoalbum.config import load_settings
from photoalbum.entities import Album, Photo
from photoalbum.errors import PhotoAlbumError
from photoalbum.logging_utils import configure_logging
from photoalbum.session import init_session


def _format_range(album: Album) -> str:
    rng = album.date_range
    if rng is None:
        return "no photos"
    return f"{rng[0]:%Y-%m-%d %H:%M} to {rng[1]:%Y-%m-%d %H:%M}"


def _print_photos(photos: Iterable[Photo]) -> None:
    for p in photos:
        tags = ", ".join(sorted(str(t) for t in p.tags))
        line = f"  - {p.filepath} ({p.date_taken:%Y-%m-%d %H:%M:%S})"
        if p.caption:
            line += f" \"{p.caption}\""
        if tags:
            line += f" [{tags}]"
        print(line)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date/time '{value}', expected ISO format")


# users
def users_list(args, lib: PhotoLibrary):
    users = lib.list_users()
    if not users:
        print("No users")
        return 0
    for u in users:
        print(f"{u.username} ({len(u.albums)} albums)")
    return 0


def users_create(args, lib: PhotoLibrary):
    user = lib.create_user(args.name)
    print(f"User '{user.username}' created.")
    return 0


def users_delete(args, lib: PhotoLibrary):
    lib.delete_user(args.name)
    print(f"User '{args.name}' deleted.")
    return 0


# albums
def albums_list(args, lib: PhotoLibrary):
    albums = lib.albums()
    if not albums:
        print("No albums")
        return 0
    for a in albums:
        print(f"{a.name}: {a.photo_count} photos, {_format_range(a)}")
    return 0


def albums_create(args, lib: PhotoLibrary):
    album = lib.create_album(args.name)
    print(f"Album '{album.name}' created.")
    return 0


def albums_rename(args, lib: PhotoLibrary):
    album = lib.rename_album(args.album, args.name)
    print(f"Album renamed to '{album.name}'.")
    return 0


def albums_delete(args, lib: PhotoLibrary):
    lib.delete_album(args.album)
    print(f"Album '{args.album}' deleted.")
    return 0


def albums_show(args, lib: PhotoLibrary):
    album = lib.open_album(args.album)
    print(f"{album.name}: {album.photo_count} photos, {_format_range(album)}")
    _print_photos(album.photos)
    return 0


# photos
def photos_add(args, lib: PhotoLibrary):
    photo = lib.add_photo(args.album, args.path, date_taken=args.date, caption=args.caption or "")
    print(f"Added {photo.filepath} to '{args.album}'.")
    return 0


def photos_remove(args, lib: PhotoLibrary):
    lib.delete_photo(args.album, args.path)
    print(f"Removed {args.path} from '{args.album}'.")
    return 0


def photos_copy(args, lib: PhotoLibrary):
    lib.open_album(args.album)
    lib.copy_photo(args.path, args.dest)
    print(f"Copied {args.path} to '{args.dest}'.")
    return 0


def photos_move(args, lib: PhotoLibrary):
    lib.open_album(args.album)
    lib.move_photo(args.path, args.dest)
    print(f"Moved {args.path} to '{args.dest}'.")
    return 0


def photos_caption(args, lib: PhotoLibrary):
    lib.set_caption(args.path, args.text, album=args.album)
    print("Caption updated.")
    return 0


def photos_tag(args, lib: PhotoLibrary):
    lib.add_tag(args.path, args.name, args.value, album=args.album)
    print(f"Tagged {args.path} with {args.name}={args.value}.")
    return 0


def photos_untag(args, lib: PhotoLibrary):
    lib.remove_tag(args.path, args.name, args.value, album=args.album)
    print(f"Removed tag {args.name}={args.value} from {args.path}.")
    return 0


# search
def _report_results(args, lib: PhotoLibrary, results: list[Photo]):
    if not results:
        print("No matching photos found.")
    else:
        print(f"{len(results)} photos found.")
        _print_photos(results)
    if getattr(args, "save_as", None):
        album = lib.create_album_from_results(args.save_as)
        print(f"New album '{album.name}' created with {album.photo_count} photos.")
    return 0


def search_date(args, lib: PhotoLibrary):
    results = lib.search_by_date(args.start, args.end, args.album)
    return _report_results(args, lib, results)


def search_tag(args, lib: PhotoLibrary):
    results = lib.search_by_tag(args.query, args.album)
    return _report_results(args, lib, results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="photoalbum")
    parser.add_argument("--config", help="Path to JSON config file (default: ./config.json)")
    # CLI flags override values from config.json
    parser.add_argument("--data-dir", help="Override config: directory holding users/ and stock/")
    parser.add_argument("--log-level", help="Override config: logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="cmd")

    # users: run as admin
    p_users = sub.add_parser("users", help="Manage user accounts (admin)")
    users_sub = p_users.add_subparsers(dest="action")
    p = users_sub.add_parser("list")
    p.set_defaults(func=users_list)
    p = users_sub.add_parser("create")
    p.add_argument("name")
    p.set_defaults(func=users_create)
    p = users_sub.add_parser("delete")
    p.add_argument("name")
    p.set_defaults(func=users_delete)

    member = argparse.ArgumentParser(add_help=False)
    member.add_argument("--user", required=True, help="User to log in as")

    p_albums = sub.add_parser("albums", help="Manage albums")
    albums_sub = p_albums.add_subparsers(dest="action")
    p = albums_sub.add_parser("list", parents=[member])
    p.set_defaults(func=albums_list)
    p = albums_sub.add_parser("create", parents=[member])
    p.add_argument("name")
    p.set_defaults(func=albums_create)
    p = albums_sub.add_parser("rename", parents=[member])
    p.add_argument("album")
    p.add_argument("name")
    p.set_defaults(func=albums_rename)
    p = albums_sub.add_parser("delete", parents=[member])
    p.add_argument("album")
    p.set_defaults(func=albums_delete)
    p = albums_sub.add_parser("show", parents=[member])
    p.add_argument("album")
    p.set_defaults(func=albums_show)

    p_photos = sub.add_parser("photos", help="Add, remove, copy, move and annotate photos")
    photos_sub = p_photos.add_subparsers(dest="action")
    p = photos_sub.add_parser("add", parents=[member])
    p.add_argument("album")
    p.add_argument("path")
    p.add_argument("--date", type=_parse_datetime, help="Date taken (default: EXIF date or file mtime)")
    p.add_argument("--caption")
    p.set_defaults(func=photos_add)
    p = photos_sub.add_parser("remove", parents=[member])
    p.add_argument("album")
    p.add_argument("path")
    p.set_defaults(func=photos_remove)
    for name, func in (("copy", photos_copy), ("move", photos_move)):
        p = photos_sub.add_parser(name, parents=[member])
        p.add_argument("album", help="Source album")
        p.add_argument("path")
        p.add_argument("dest", help="Destination album")
        p.set_defaults(func=func)
    p = photos_sub.add_parser("caption", parents=[member])
    p.add_argument("album")
    p.add_argument("path")
    p.add_argument("text")
    p.set_defaults(func=photos_caption)
    for name, func in (("tag", photos_tag), ("untag", photos_untag)):
        p = photos_sub.add_parser(name, parents=[member])
        p.add_argument("album")
        p.add_argument("path")
        p.add_argument("name", help="Tag type, e.g. location or person")
        p.add_argument("value")
        p.set_defaults(func=func)

    p_search = sub.add_parser("search", help="Search photos by date range or tags")
    search_sub = p_search.add_subparsers(dest="action")
    p = search_sub.add_parser("date", parents=[member])
    p.add_argument("start", type=_parse_date)
    p.add_argument("end", type=_parse_date)
    p.set_defaults(func=search_date)
    p = search_sub.add_parser("tag", parents=[member])
    p.add_argument("query", help='e.g. "person=alice AND location=paris"')
    p.set_defaults(func=search_tag)
    for p in (search_sub.choices["date"], search_sub.choices["tag"]):
        p.add_argument("--album", help="Only search this album (default: all albums)")
        p.add_argument("--save-as", help="Create an album with the results")

    return parser


def main(argv=None, library: Optional[PhotoLibrary] = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    settings = load_settings(args.config, data_dir=args.data_dir, log_level=args.log_level)
    configure_logging(settings.log_level)
    if library is None:
        init_session(tag_types=settings.tag_types, tag_policies=settings.tag_policies)
        library = PhotoLibrary(settings)
    lib = library
    try:
        lib.login(getattr(args, "user", None) or "admin")
        return args.func(args, lib)
    except PhotoAlbumError as exc:
        print(f"error: {exc.message}")
        return 1
    finally:
        lib.logout()


if __name__ == "__main__":
    raise SystemExit(main())
