"""
Explicit outcome types for service operations.

Services return ``Ok(value)`` or ``Err(error)`` for the expected rejection
paths (authorization, schedule conflicts, missing resources) so callers
handle them at the call site. Infrastructure failures still raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from .exceptions import DomainException

T = TypeVar("T")
E = TypeVar("E", bound=DomainException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Ok[T], Err[E]]
