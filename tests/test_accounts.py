import os
from datetime import datetime
from pathlib import Path

import pytest

from photoalbum.config import Settings
from photoalbum.entities import Album, Role, User
from photoalbum.errors import (
    DuplicateUserError,
    EmptyNameError,
    ReservedUserError,
    StoreIOError,
    UnknownUserError,
)
from photoalbum.lib.store import UserStore
from photoalbum.services.accounts import AccountManager
from photoalbum.services.seeding import seed_stock_user


def make_manager(tmp_path):
    data = tmp_path / "data"
    settings = Settings(data_dir=data, users_dir=data / "users", stock_dir=data / "stock")
    return AccountManager(UserStore(settings.users_dir), settings)


def write_seed(folder, names):
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        (folder / name).write_bytes(b"not really an image")


def test_create_list_and_delete_users(tmp_path):
    manager = make_manager(tmp_path)
    manager.create_user("alice")
    manager.create_user(" Bob ")
    assert [u.username for u in manager.list_users()] == ["alice", "Bob"]

    manager.delete_user("BOB")
    assert [u.username for u in manager.list_users()] == ["alice"]


def test_create_user_rejects_duplicates_and_reserved_names(tmp_path):
    manager = make_manager(tmp_path)
    manager.create_user("alice")
    for name in ("ALICE", "admin", "Stock"):
        with pytest.raises(DuplicateUserError):
            manager.create_user(name)
    with pytest.raises(EmptyNameError):
        manager.create_user("   ")


def test_delete_user_errors(tmp_path):
    manager = make_manager(tmp_path)
    for name in ("admin", "stock", "STOCK"):
        with pytest.raises(ReservedUserError):
            manager.delete_user(name)
    with pytest.raises(UnknownUserError):
        manager.delete_user("ghost")


def test_list_users_skips_corrupt_blobs(tmp_path):
    manager = make_manager(tmp_path)
    manager.create_user("alice")
    (manager.store.users_dir / "broken.dat").write_bytes(b"garbage")
    assert [u.username for u in manager.list_users()] == ["alice"]


def test_login_admin_is_transient(tmp_path):
    manager = make_manager(tmp_path)
    admin = manager.login("Admin")
    assert admin.role is Role.ADMIN
    assert admin.albums == []
    assert manager.store.keys() == []
    assert manager.store.users_dir.is_dir()


def test_login_member(tmp_path):
    manager = make_manager(tmp_path)
    manager.create_user("alice")
    assert manager.login(" alice ").username == "alice"
    with pytest.raises(UnknownUserError):
        manager.login("ghost")
    with pytest.raises(EmptyNameError):
        manager.login("")


def test_login_fails_when_users_dir_cannot_be_created(tmp_path):
    data = tmp_path / "data"
    data.write_text("not a directory")
    settings = Settings(data_dir=data, users_dir=data / "users", stock_dir=data / "stock")
    manager = AccountManager(UserStore(settings.users_dir), settings)
    with pytest.raises(StoreIOError):
        manager.login("admin")


def test_seed_stock_user_picks_images_only(tmp_path):
    seed = tmp_path / "seed"
    write_seed(seed, ["b.PNG", "a.jpg", "c.jpeg", "d.gif", "e.bmp", "notes.txt", "jpg"])
    (seed / "sub.jpg").mkdir()
    stamp = datetime(2023, 1, 2, 3, 4, 5).timestamp()
    os.utime(seed / "a.jpg", (stamp, stamp))

    user = User("stock")
    album = seed_stock_user(user, seed)
    assert album is user.albums[0]
    assert album.name == "stock"
    assert [os.path.basename(p.filepath) for p in album.photos] == ["a.jpg", "b.PNG", "c.jpeg", "d.gif", "e.bmp"]
    assert all(os.path.isabs(p.filepath) for p in album.photos)
    assert all(p.caption == "" for p in album.photos)
    assert album.photos[0].date_taken == datetime(2023, 1, 2, 3, 4, 5)


def test_seed_is_noop_when_stock_album_exists(tmp_path):
    seed = tmp_path / "seed"
    write_seed(seed, ["a.jpg"])
    user = User("stock", albums=[Album("Stock")])
    assert seed_stock_user(user, seed) is None
    assert user.albums[0].photos == []


def test_seed_without_directory_creates_empty_album(tmp_path):
    user = User("stock")
    album = seed_stock_user(user, tmp_path / "missing")
    assert album is not None and album.photos == []


def test_stock_login_is_idempotent_and_reseeds(tmp_path):
    manager = make_manager(tmp_path)
    write_seed(manager.settings.stock_dir, ["one.jpg", "two.png", "three.gif"])

    manager.login("stock")
    stock = manager.login("stock")
    assert [a.name for a in stock.albums] == ["stock"]
    assert stock.albums[0].photo_count == 3

    stock.albums.clear()
    manager.store.save(stock)
    again = manager.login("STOCK")
    assert again.albums[0].photo_count == 3


def test_unreadable_seed_directory_seeds_nothing(tmp_path, monkeypatch):
    manager = make_manager(tmp_path)
    write_seed(manager.settings.stock_dir, ["one.jpg"])

    def refuse(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "iterdir", refuse)
    stock = manager.login("stock")
    assert [a.name for a in stock.albums] == ["stock"]
    assert stock.albums[0].photos == []
