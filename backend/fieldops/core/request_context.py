from __future__ import annotations

from contextvars import ContextVar, Token
import logging
from typing import Optional

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_actor_id_var: ContextVar[str] = ContextVar("actor_id", default="")


def set_request_id(request_id: Optional[str]) -> Token[str]:
    return _request_id_var.set(request_id or "")


def reset_request_id(token: Token[str]) -> None:
    _request_id_var.reset(token)


def get_request_id_value(default: str = "no-request") -> str:
    value = _request_id_var.get()
    return value if value else default


def set_actor_id(actor_id: Optional[str]) -> Token[str]:
    return _actor_id_var.set(actor_id or "")


def reset_actor_id(token: Token[str]) -> None:
    _actor_id_var.reset(token)


def get_actor_id_value(default: str = "-") -> str:
    value = _actor_id_var.get()
    return value if value else default


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id_value()
        if not hasattr(record, "actor_id"):
            record.actor_id = get_actor_id_value()
        return True


def attach_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
