"""MongoDB-backed record store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from accounts.errors import AlreadyExistsError, InvalidIdError, StoreError
from accounts.stores.base import RecordStore

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from accounts.stores.base import T

logger = structlog.get_logger()

_ID_FIELD = "id"
_MONGO_ID_FIELD = "_id"


def _to_document(record: Mapping[str, Any]) -> dict[str, Any]:
    doc = {k: v for k, v in record.items() if k != _ID_FIELD}
    if record.get(_ID_FIELD):
        doc[_MONGO_ID_FIELD] = ObjectId(record[_ID_FIELD])
    return doc


def _from_document(doc: Mapping[str, Any]) -> dict[str, Any]:
    record = {k: v for k, v in doc.items() if k != _MONGO_ID_FIELD}
    record[_ID_FIELD] = str(doc[_MONGO_ID_FIELD])
    return record


class MongoRecordStore(RecordStore):
    """Record store over one MongoDB collection.

    Filters are key/value equality dicts. The logical "id" field is stored
    as the native ObjectId "_id". A unique index on username, created on
    connect, is the authoritative duplicate check.
    """

    name = "mongo"

    def __init__(
        self,
        uri: str,
        database: str,
        collection: str = "user",
        *,
        server_selection_timeout_ms: int = 5000,
        client: Any = None,
    ) -> None:
        self._uri = uri
        self._database_name = database
        self._collection_name = collection
        self._timeout_ms = server_selection_timeout_ms
        self._client = client
        self._collection: Any = None

    @property
    def collection(self) -> Any:
        if self._collection is None:
            raise StoreError("mongo store is not connected")
        return self._collection

    async def connect(self) -> None:
        if self._client is None:
            self._client = AsyncMongoClient(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
        try:
            await self._client.admin.command("ping")
            collection = self._client[self._database_name][self._collection_name]
            await collection.create_index("username", unique=True)
        except PyMongoError as exc:
            raise StoreError("Failed to connect to mongo store") from exc
        self._collection = collection
        logger.info("mongo store connected", database=self._database_name, collection=self._collection_name)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._collection = None

    async def create(self, record: Mapping[str, Any]) -> None:
        try:
            doc = _to_document(record)
        except InvalidId as exc:
            raise InvalidIdError(f"Invalid id: {record.get(_ID_FIELD)!r}") from exc
        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise AlreadyExistsError(f"Record with username '{record.get('username')}' already exists") from exc
        except PyMongoError as exc:
            raise StoreError("Failed to insert document") from exc

    async def read(self, filter: Mapping[str, Any], materializer: Callable[[Mapping[str, Any]], T]) -> list[T]:  # noqa: A002
        try:
            return [materializer(_from_document(doc)) async for doc in self.collection.find(dict(filter))]
        except PyMongoError as exc:
            raise StoreError("Failed to query documents") from exc

    async def update(self, filter: Mapping[str, Any], patch: Mapping[str, Any]) -> int:  # noqa: A002
        if _ID_FIELD in patch:
            raise ValueError("The id of a stored record cannot be changed")
        try:
            result = await self.collection.update_many(dict(filter), {"$set": dict(patch)})
        except DuplicateKeyError as exc:
            raise AlreadyExistsError("Update would violate a uniqueness constraint") from exc
        except PyMongoError as exc:
            raise StoreError("Failed to update documents") from exc
        return result.modified_count

    async def delete(self, filter: Mapping[str, Any]) -> int:  # noqa: A002
        try:
            result = await self.collection.delete_many(dict(filter))
        except PyMongoError as exc:
            raise StoreError("Failed to delete documents") from exc
        return result.deleted_count

    def match_all(self) -> dict[str, Any]:
        return {}

    def match(self, field: str, value: Any) -> dict[str, Any]:
        if field == _ID_FIELD:
            return {_MONGO_ID_FIELD: value}
        return {field: value}

    def new_id(self) -> str:
        return str(ObjectId())

    def parse_id(self, raw: str) -> ObjectId:
        try:
            return ObjectId(raw)
        except (InvalidId, TypeError) as exc:
            raise InvalidIdError(f"Invalid id: {raw!r}") from exc
