"""User service coordinating store connection, registration, login, and lookups."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

import structlog

from accounts.errors import InvalidCredentialsError, NotFoundError, StoreError
from accounts.models import User
from accounts.repository import UserRepository

if TYPE_CHECKING:
    from accounts.password import PasswordHasher
    from accounts.stores.base import RecordStore

logger = structlog.get_logger()

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

PASSWORD_MAX_BYTES = 72  # bcrypt ignores anything past 72 bytes

_INVALID_CREDENTIALS = "Invalid credentials"


class UserService:
    """Entry point used by the transport layer.

    Call connect() once at startup before anything else; it retries the
    store connection a bounded number of times and raises StoreError when
    the backend stays unreachable. A successful connect also prepares the
    dummy hash that unknown-user logins verify against.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        password_hasher: PasswordHasher,
        connect_attempts: int = 3,
        connect_retry_delay: float = 1.0,
    ) -> None:
        self._store = store
        self._repo = UserRepository(store)
        self._hasher = password_hasher
        self._connect_attempts = connect_attempts
        self._connect_retry_delay = connect_retry_delay
        self._dummy_hash: str | None = None

    async def connect(self) -> None:
        """Connect the configured store, retrying on StoreError."""
        for attempt in range(1, self._connect_attempts + 1):
            try:
                await self._store.connect()
            except StoreError as exc:
                logger.warning(
                    "store connect attempt failed",
                    backend=self._store.name,
                    attempt=attempt,
                    attempts=self._connect_attempts,
                    error=str(exc.__cause__ or exc),
                )
                if attempt == self._connect_attempts:
                    raise
                await asyncio.sleep(self._connect_retry_delay)
            else:
                logger.info("store connected", backend=self._store.name)
                await self._get_dummy_hash()
                return

    async def close(self) -> None:
        await self._store.close()

    async def register(self, username: str, password: str) -> User:
        """Validate input, hash the password, and create the user."""
        _validate_username(username)
        _validate_password(password)
        hashed = await self._hasher.hash(password)
        return await self._repo.create(User(username=username, password=hashed))

    async def create_user(self, user: User) -> User:
        return await self._repo.create(user)

    async def get_all_users(self) -> list[User]:
        return await self._repo.get_all()

    async def find_user_by_id(self, user_id: str) -> User:
        return await self._repo.find_by_id(user_id)

    async def find_user_by_username(self, username: str) -> User:
        return await self._repo.find_by_username(username)

    async def search(self, *, user_id: str | None = None, username: str | None = None) -> User | None:
        """Look up one user by username, or by id when no username is given.

        With neither key given this is a no-op that returns None.
        """
        if username:
            return await self._repo.find_by_username(username)
        if user_id:
            return await self._repo.find_by_id(user_id)
        return None

    async def login(self, username: str, password: str) -> User:
        """Verify credentials. Unknown user and wrong password fail identically."""
        try:
            user = await self._repo.find_by_username(username)
        except NotFoundError:
            # Burn a verification anyway so both failure paths take the same time.
            await self._hasher.verify(password, await self._get_dummy_hash())
            logger.info("login failed", username=username, reason="unknown_user")
            raise InvalidCredentialsError(_INVALID_CREDENTIALS) from None

        if not await self._hasher.verify(password, user.password):
            logger.info("login failed", username=username, reason="wrong_password")
            raise InvalidCredentialsError(_INVALID_CREDENTIALS)
        return user

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self._hasher.hash("dummy-password-for-timing")
        return self._dummy_hash


def _validate_username(username: str) -> None:
    """Validate username: 3-30 chars, alphanumeric + underscores."""
    if len(username) < USERNAME_MIN_LENGTH or len(username) > USERNAME_MAX_LENGTH:
        raise InvalidCredentialsError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
        )
    if not USERNAME_PATTERN.match(username):
        raise InvalidCredentialsError("Username must contain only letters, numbers, and underscores")


def _validate_password(password: str) -> None:
    """Validate password: non-empty, max 72 UTF-8 bytes (bcrypt limit)."""
    if not password:
        raise InvalidCredentialsError("Password must not be empty")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise InvalidCredentialsError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes when encoded")
