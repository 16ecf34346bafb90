"""Minimal Ok/Err result type for async operations whose failures are expected."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]


async def capture(awaitable: Awaitable[T]) -> Result[T, Exception]:
    """Await and fold any raised Exception into an Err.

    Cancellation is not an Exception subclass and still propagates.
    """
    try:
        return Ok(await awaitable)
    except Exception as e:
        return Err(e)
