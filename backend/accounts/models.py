"""User account model."""

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel


class User(BaseModel, frozen=True):
    """User account stored in a record store."""

    id: str = ""  # assigned by the store on create
    username: str
    password: str  # bcrypt hash, never plaintext

    def to_record(self) -> dict[str, str]:
        return self.model_dump()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Self:
        """Materialize a user from a raw stored mapping."""
        return cls.model_validate(dict(record))
