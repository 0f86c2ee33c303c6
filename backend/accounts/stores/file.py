"""File-backed record store keeping all records as a JSON array."""

from __future__ import annotations

import asyncio
import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from accounts.errors import AlreadyExistsError, StoreError
from accounts.stores.base import Record, RecordStore, new_uuid_id, parse_uuid_id

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from accounts.stores.base import T

logger = structlog.get_logger()

_FILE_PERMISSIONS = 0o600  # owner read/write only


class JsonFileStore(RecordStore):
    """File-backed record store.

    Loads the whole dataset into memory on connect and rewrites the file
    atomically after every mutation. A single asyncio.Lock guards every
    read-modify-write, including the uniqueness checks in create() and
    update(), so concurrent writers within one process cannot lose records
    or slip a duplicate username past the check.

    Limitation: only one process may own the file. Use the Mongo or SQL
    store when several service instances share the data.
    """

    name = "file"

    def __init__(self, file_path: str | Path, unique_fields: tuple[str, ...] = ("id", "username")) -> None:
        self._file_path = Path(file_path)
        self._unique_fields = unique_fields
        self._records: list[Record] = []
        self._lock = asyncio.Lock()
        self._loaded = False

    async def connect(self) -> None:
        await self._ensure_loaded()
        logger.info("file store loaded", path=str(self._file_path), count=len(self._records))

    async def close(self) -> None:
        async with self._lock:
            self._records = []
            self._loaded = False

    async def _ensure_loaded(self) -> None:
        async with self._lock:
            if self._loaded:
                return
            self._load_from_file()
            self._loaded = True

    def _load_from_file(self) -> None:
        """Load records from the JSON file into memory.

        A missing or blank file means an empty store. Raises StoreError on
        read/parse failures of an existing file so that a later write never
        replaces data we could not read.
        """
        self._records = []

        if not self._file_path.exists():
            return

        try:
            raw = self._file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Failed to load records from {self._file_path}") from exc

        if not raw.strip():
            return

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as exc:
            raise StoreError(f"Failed to load records from {self._file_path}") from exc

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise StoreError(f"Expected JSON array of objects in {self._file_path}")

        self._records = data

    def _save_to_file(self, records: list[Record]) -> None:
        """Atomically write all records to the JSON file.

        Writes to a temporary file in the same directory, then renames
        into place so readers never see a partial/truncated file.
        """
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(records, indent=2).encode("utf-8")

        fd, tmp_path = tempfile.mkstemp(
            dir=self._file_path.parent,
            prefix=".records_",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fchmod(f.fileno(), _FILE_PERMISSIONS)
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise

    def _commit(self, records: list[Record]) -> None:
        """Persist a new dataset, then swap it in. Memory is untouched on failure."""
        try:
            self._save_to_file(records)
        except OSError as exc:
            raise StoreError(f"Failed to write records to {self._file_path}") from exc
        self._records = records

    @staticmethod
    def _matches(record: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:  # noqa: A002
        return all(record.get(key) == value for key, value in filter.items())

    async def create(self, record: Mapping[str, Any]) -> None:
        await self._ensure_loaded()
        async with self._lock:
            for field in self._unique_fields:
                value = record.get(field)
                if any(existing.get(field) == value for existing in self._records):
                    raise AlreadyExistsError(f"Record with {field} '{value}' already exists")
            self._commit([*self._records, dict(record)])

    async def read(self, filter: Mapping[str, Any], materializer: Callable[[Mapping[str, Any]], T]) -> list[T]:  # noqa: A002
        await self._ensure_loaded()
        return [materializer(dict(r)) for r in self._records if self._matches(r, filter)]

    async def update(self, filter: Mapping[str, Any], patch: Mapping[str, Any]) -> int:  # noqa: A002
        await self._ensure_loaded()
        async with self._lock:
            matched = [r for r in self._records if self._matches(r, filter)]
            if not matched:
                return 0
            for field in self._unique_fields:
                if field not in patch:
                    continue
                value = patch[field]
                # One value written to several records, or onto a record outside the filter.
                if len(matched) > 1 or any(
                    r.get(field) == value for r in self._records if not self._matches(r, filter)
                ):
                    raise AlreadyExistsError(f"Record with {field} '{value}' already exists")
            self._commit([{**r, **patch} if self._matches(r, filter) else r for r in self._records])
            return len(matched)

    async def delete(self, filter: Mapping[str, Any]) -> int:  # noqa: A002
        await self._ensure_loaded()
        async with self._lock:
            records = [r for r in self._records if not self._matches(r, filter)]
            deleted = len(self._records) - len(records)
            if deleted:
                self._commit(records)
            return deleted

    def match_all(self) -> dict[str, Any]:
        return {}

    def match(self, field: str, value: Any) -> dict[str, Any]:
        return {field: value}

    def new_id(self) -> str:
        return new_uuid_id()

    def parse_id(self, raw: str) -> str:
        return parse_uuid_id(raw)
