"""User accounts core: record stores, repository, credentials, and service facade."""

from accounts.errors import (
    AccountsError,
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidIdError,
    NotFoundError,
    StoreError,
)
from accounts.models import User
from accounts.password import BcryptHasher, PasswordHasher, SimpleHasher, get_hasher
from accounts.repository import UserRepository
from accounts.service import UserService
from accounts.settings import AccountsSettings
from accounts.stores import open_store

__all__ = [
    "AccountsError",
    "AccountsSettings",
    "AlreadyExistsError",
    "BcryptHasher",
    "InvalidCredentialsError",
    "InvalidIdError",
    "NotFoundError",
    "PasswordHasher",
    "SimpleHasher",
    "StoreError",
    "User",
    "UserRepository",
    "UserService",
    "get_hasher",
    "open_store",
]
