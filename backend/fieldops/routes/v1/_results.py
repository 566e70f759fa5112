"""Helpers shared by v1 routes."""

from typing import NoReturn, TypeVar

from fastapi import Response

from ...core.constants import EVENT_PROPAGATION_HEADER
from ...core.exceptions import DomainException
from ...core.results import Result

T = TypeVar("T")


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


def unwrap_or_raise(result: Result[T, DomainException]) -> T:
    if not result.ok:
        handle_domain_exception(result.error)
    return result.value


def mark_propagation_incomplete(response: Response) -> None:
    """The write committed but at least one event handler failed."""
    response.headers[EVENT_PROPAGATION_HEADER] = "incomplete"
