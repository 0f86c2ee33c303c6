"""Backend-agnostic user persistence over a record store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from accounts.errors import AlreadyExistsError, NotFoundError
from accounts.models import User

if TYPE_CHECKING:
    from accounts.stores.base import RecordStore

logger = structlog.get_logger()


class UserRepository:
    """User lookups and uniqueness-checked creation.

    The username pre-check in create() is a fast path only. Two concurrent
    creates can both pass it; the store's own uniqueness enforcement is
    what rejects the second one.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def get_all(self) -> list[User]:
        return await self._store.read(self._store.match_all(), User.from_record)

    async def create(self, user: User) -> User:
        """Persist a new user, assigning an id when it has none. Returns the stored user.

        A caller-supplied id is normalized through the store's parse_id(), so
        a malformed one raises InvalidIdError before anything is written.
        """
        try:
            await self.find_by_username(user.username)
        except NotFoundError:
            pass
        else:
            logger.info("duplicate username rejected", username=user.username)
            raise AlreadyExistsError(f"Username '{user.username}' already taken")

        if user.id:
            # Stored in the same normalized form find_by_id() looks up.
            user = user.model_copy(update={"id": str(self._store.parse_id(user.id))})
        else:
            user = user.model_copy(update={"id": self._store.new_id()})
        await self._store.create(user.to_record())
        logger.info("user created", user_id=user.id, username=user.username, backend=self._store.name)
        return user

    async def find_by_id(self, user_id: str) -> User:
        key = self._store.parse_id(user_id)
        return await self._first(self._store.match("id", key), f"No user with id '{user_id}'")

    async def find_by_username(self, username: str) -> User:
        return await self._first(self._store.match("username", username), f"No user named '{username}'")

    async def _first(self, filter: object, not_found: str) -> User:  # noqa: A002
        found = await self._store.read(filter, User.from_record)
        if not found:
            raise NotFoundError(not_found)
        return found[0]
