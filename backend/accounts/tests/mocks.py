"""In-memory stand-ins for the pymongo async client used by MongoRecordStore tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from unittest.mock import AsyncMock

from pymongo.errors import DuplicateKeyError


@dataclass
class _UpdateResult:
    modified_count: int


@dataclass
class _DeleteResult:
    deleted_count: int


class _AsyncCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = iter(docs)

    def __aiter__(self) -> _AsyncCursor:
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._docs)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    """Equality-filter subset of AsyncCollection with _id and unique-index enforcement."""

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.unique_fields: set[str] = {"_id"}
        self.find_calls: list[dict[str, Any]] = []

    async def create_index(self, field: str, *, unique: bool = False) -> str:
        if unique:
            self.unique_fields.add(field)
        return f"{field}_1"

    @staticmethod
    def _matches(doc: dict[str, Any], flt: dict[str, Any]) -> bool:
        return all(doc.get(k) == v for k, v in flt.items())

    async def insert_one(self, doc: dict[str, Any]) -> None:
        for field in self.unique_fields:
            if field in doc and any(d.get(field) == doc[field] for d in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error index: {field}_1", code=11000)
        self.docs.append(dict(doc))

    def find(self, flt: dict[str, Any]) -> _AsyncCursor:
        self.find_calls.append(flt)
        return _AsyncCursor([dict(d) for d in self.docs if self._matches(d, flt)])

    async def update_many(self, flt: dict[str, Any], update: dict[str, Any]) -> _UpdateResult:
        count = 0
        for doc in self.docs:
            if self._matches(doc, flt):
                doc.update(update["$set"])
                count += 1
        return _UpdateResult(modified_count=count)

    async def delete_many(self, flt: dict[str, Any]) -> _DeleteResult:
        before = len(self.docs)
        self.docs = [d for d in self.docs if not self._matches(d, flt)]
        return _DeleteResult(deleted_count=before - len(self.docs))


class FakeMongoClient:
    """Client exposing admin.command("ping"), client[db][collection], and close()."""

    def __init__(self, collection: FakeCollection | None = None) -> None:
        self.collection = collection or FakeCollection()
        self.admin = AsyncMock()
        self.admin.command = AsyncMock(return_value={"ok": 1})
        self.close = AsyncMock()
        self.databases: list[str] = []

    def __getitem__(self, database: str) -> dict[str, FakeCollection]:
        self.databases.append(database)
        collection = self.collection

        class _Database:
            def __getitem__(self, _name: str) -> FakeCollection:
                return collection

        return _Database()  # type: ignore[return-value]
