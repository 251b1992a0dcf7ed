"""Tagged result type carried across component boundaries.

Services raise ``DomainError`` subclasses; the boundary (controllers, widgets
that render inline) turns them into ``Ok`` / ``Err`` values instead of letting
raw exceptions escape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

import mysql.connector

from .enums import ErrorKind
from .exceptions import DomainError, InfrastructureError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    message: str = ""

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    code: str
    message: str

    @property
    def success(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, exc: DomainError) -> "Err":
        return cls(kind=exc.kind, code=exc.code, message=exc.message)


Result = Union[Ok[T], Err]


HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHORIZATION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STATE_CONFLICT: 409,
    ErrorKind.INFRASTRUCTURE: 503,
}


def capture(fn: Callable[..., T], *args: Any, success_message: str = "", **kwargs: Any) -> Result:
    """Run ``fn`` and fold domain/storage failures into an ``Err``."""

    try:
        return Ok(fn(*args, **kwargs), success_message)
    except DomainError as e:
        return Err.from_exception(e)
    except mysql.connector.Error:
        logger.exception("Storage failure in %s", getattr(fn, "__qualname__", fn))
        return Err.from_exception(InfrastructureError())


def http_status(result: Result) -> int:
    if isinstance(result, Ok):
        return 200
    return HTTP_STATUS_BY_KIND.get(result.kind, 400)
