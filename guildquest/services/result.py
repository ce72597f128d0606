"""Service return type: a value or a typed core error, never both."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from guildquest.core.errors import CoreError

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[CoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CoreError) -> "ServiceResult[T]":
        return cls(error=error)
