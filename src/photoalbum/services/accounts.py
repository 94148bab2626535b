"""Admin view over the stored users, and login.

``admin`` is recognised by name and never stored; ``stock`` is a regular
account that gets seeded on login. Neither can be created or deleted here.
"""
from __future__ import annotations

import logging
from typing import Optional

from photoalbum.config import Settings
from photoalbum.entities import RESERVED_ADMIN, RESERVED_STOCK, Role, User, is_reserved
from photoalbum.errors import DuplicateUserError, EmptyNameError, ReservedUserError, UnknownUserError
from photoalbum.lib.store import UserStore, validate_key
from photoalbum.services.seeding import seed_stock_user

logger = logging.getLogger(__name__)


class AccountManager:
    def __init__(self, store: UserStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or Settings()

    def list_users(self) -> list[User]:
        """Every stored user; blobs that cannot be loaded are skipped."""
        users = []
        for key in self.store.keys():
            user = self.store.load(key)
            if user is None:
                logger.warning("skipping unreadable user blob '%s'", key)
                continue
            users.append(user)
        return users

    def create_user(self, username: str) -> User:
        """Create and persist an empty member account.

        Raises:
            EmptyNameError: blank name
            InvalidNameError: name unusable as a file name
            DuplicateUserError: name is reserved or already taken (case-insensitive)
            StoreIOError: the new user could not be written
        """
        username = (username or "").strip()
        key = validate_key(username)
        if is_reserved(username) or self.store.exists(key):
            raise DuplicateUserError(f"user '{username}' already exists")
        user = User(username=username, role=Role.MEMBER)
        self.store.save(user, key)
        logger.info("user '%s' created", username)
        return user

    def delete_user(self, username: str) -> None:
        """Remove a stored member account.

        Raises:
            ReservedUserError: ``admin`` or ``stock``
            UnknownUserError: no such user
            StoreIOError: the blob could not be removed
        """
        username = (username or "").strip()
        if not username:
            raise EmptyNameError("a user name must not be empty")
        if is_reserved(username):
            raise ReservedUserError(f"the {username.lower()} user cannot be deleted")
        if not self.store.delete(validate_key(username)):
            raise UnknownUserError(f"user '{username}' does not exist")
        logger.info("user '%s' deleted", username)

    def login(self, username: str) -> User:
        """Resolve ``username`` to the user the session should bind.

        Raises:
            EmptyNameError: blank name
            StoreIOError: the users directory cannot be created, or the seeded
                stock user cannot be saved
            UnknownUserError: a member name with no stored blob
        """
        username = (username or "").strip()
        if not username:
            raise EmptyNameError("please enter a username")
        self.store.ensure_dir()

        key = username.lower()
        if key == RESERVED_ADMIN:
            logger.info("admin logged in")
            return User(username=RESERVED_ADMIN, role=Role.ADMIN)

        if key == RESERVED_STOCK:
            user = self.store.load(RESERVED_STOCK) or User(username=RESERVED_STOCK)
            seed_stock_user(user, self.settings.stock_dir, self.settings.seed_extensions)
            self.store.save(user, RESERVED_STOCK)
            logger.info("stock user logged in")
            return user

        user = self.store.load(validate_key(username))
        if user is None:
            raise UnknownUserError(f"user '{username}' doesn't exist")
        logger.info("user '%s' logged in", user.username)
        return user
