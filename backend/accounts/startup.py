"""Build and connect the user service from environment configuration."""

from __future__ import annotations

from accounts.password import get_hasher
from accounts.service import UserService
from accounts.settings import AccountsSettings
from accounts.stores import open_store
from shared.logging import setup_logging


async def start_user_service(settings: AccountsSettings | None = None) -> UserService:
    """Configure logging, select the store, and connect it.

    A store that stays unreachable after the configured retries raises
    StoreError; callers should let it abort startup.
    """
    if settings is None:
        settings = AccountsSettings()
    setup_logging(settings.log_dir)

    service = UserService(
        open_store(settings),
        password_hasher=get_hasher(settings.password_hasher, bcrypt_rounds=settings.bcrypt_rounds),
        connect_attempts=settings.connect_attempts,
        connect_retry_delay=settings.connect_retry_delay,
    )
    await service.connect()
    return service
