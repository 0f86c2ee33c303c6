"""Record store implementations and the startup factory that picks one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from accounts.stores.base import RecordStore
from accounts.stores.document import MongoRecordStore
from accounts.stores.file import JsonFileStore
from accounts.stores.relational import MySqlRecordStore, SqliteRecordStore, SqlQuery, SqlRecordStore

if TYPE_CHECKING:
    from accounts.settings import AccountsSettings

__all__ = [
    "JsonFileStore",
    "MongoRecordStore",
    "MySqlRecordStore",
    "RecordStore",
    "SqlQuery",
    "SqlRecordStore",
    "SqliteRecordStore",
    "open_store",
]


def open_store(settings: AccountsSettings) -> RecordStore:
    """Instantiate the record store selected by settings. Does not connect."""
    backend = settings.resolved_backend()
    if backend == "mongo":
        return MongoRecordStore(
            settings.mongo_uri or "",
            settings.mongo_database,
            settings.mongo_collection,
        )
    if backend == "mysql":
        return MySqlRecordStore(settings.mysql_uri or "")
    if backend == "sqlite":
        return SqliteRecordStore(settings.sqlite_path)
    return JsonFileStore(settings.users_file)
