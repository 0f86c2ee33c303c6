"""Abstract interface for record persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import UUID, uuid4

from accounts.errors import InvalidIdError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

T = TypeVar("T")

Record = dict[str, Any]


class RecordStore(ABC):
    """CRUD capability over one persistence medium.

    Filters are backend-specific: build them with match_all() and match()
    rather than by hand. Records are flat mappings with a logical "id" key;
    read() hands each raw record to a materializer that returns a fresh
    typed value.

    Every implementation enforces username uniqueness itself and reports a
    violation as AlreadyExistsError. Any other backend failure surfaces as
    StoreError.
    """

    name: str = "abstract"

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    async def create(self, record: Mapping[str, Any]) -> None: ...

    @abstractmethod
    async def read(self, filter: Any, materializer: Callable[[Mapping[str, Any]], T]) -> list[T]: ...  # noqa: A002

    @abstractmethod
    async def update(self, filter: Any, patch: Mapping[str, Any]) -> int: ...  # noqa: A002

    @abstractmethod
    async def delete(self, filter: Any) -> int: ...  # noqa: A002

    @abstractmethod
    def match_all(self) -> Any: ...

    @abstractmethod
    def match(self, field: str, value: Any) -> Any: ...

    @abstractmethod
    def new_id(self) -> str: ...

    @abstractmethod
    def parse_id(self, raw: str) -> Any:
        """Convert an identifier string to the native key, or raise InvalidIdError."""


def new_uuid_id() -> str:
    return uuid4().hex


def parse_uuid_id(raw: str) -> str:
    """Normalize a UUID identifier string to its 32-char hex form."""
    try:
        return UUID(raw).hex
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidIdError(f"Invalid id: {raw!r}") from exc
