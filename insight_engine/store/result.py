"""Value-or-error wrapper returned by every record store call."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from sqlalchemy import exc as sa_exc


T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why a store call did not produce a value."""

    UNAVAILABLE = "unavailable"
    QUERY = "query"
    TIMEOUT = "timeout"
    INTEGRITY = "integrity"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Either a value (``error is None``) or an error kind with detail text."""

    value: T | None = None
    error: ErrorKind | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str | None = None) -> "StoreResult[T]":
        return cls(error=kind, detail=detail)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` when the call failed or produced ``None``."""
        if self.error is not None or self.value is None:
            return default
        return self.value


_TIMEOUT_MARKERS = ("timeout", "timed out", "database is locked")


def classify_error(error: sa_exc.SQLAlchemyError) -> ErrorKind:
    """Map a SQLAlchemy exception onto an :class:`ErrorKind`."""

    if isinstance(error, sa_exc.TimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(error, sa_exc.IntegrityError):
        return ErrorKind.INTEGRITY
    if isinstance(error, sa_exc.OperationalError):
        text = str(error).lower()
        if any(marker in text for marker in _TIMEOUT_MARKERS):
            return ErrorKind.TIMEOUT
        return ErrorKind.UNAVAILABLE
    if isinstance(error, (sa_exc.DisconnectionError, sa_exc.InterfaceError)):
        return ErrorKind.UNAVAILABLE
    return ErrorKind.QUERY
