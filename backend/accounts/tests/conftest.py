"""Fixtures shared by accounts tests: one connected store per backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from accounts.password import SimpleHasher
from accounts.repository import UserRepository
from accounts.service import UserService
from accounts.stores import JsonFileStore, MongoRecordStore, SqliteRecordStore
from accounts.tests.mocks import FakeMongoClient

if TYPE_CHECKING:
    from pathlib import Path

    from accounts.stores.base import RecordStore


def _make_store(kind: str, tmp_path: Path) -> RecordStore:
    if kind == "file":
        return JsonFileStore(tmp_path / "users.json")
    if kind == "sqlite":
        return SqliteRecordStore(tmp_path / "users.db")
    return MongoRecordStore("mongodb://fake", "usermanagement", client=FakeMongoClient())


@pytest.fixture(params=["file", "sqlite", "mongo"])
async def store(request, tmp_path: Path):
    s = _make_store(request.param, tmp_path)
    await s.connect()
    yield s
    await s.close()


@pytest.fixture
def user_repo(store: RecordStore) -> UserRepository:
    return UserRepository(store)


@pytest.fixture
def user_service(store: RecordStore) -> UserService:
    return UserService(store, password_hasher=SimpleHasher(), connect_attempts=1, connect_retry_delay=0)
