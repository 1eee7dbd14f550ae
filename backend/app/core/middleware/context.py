from __future__ import annotations

from structlog import contextvars


def set_request_id(request_id: str) -> None:
    contextvars.bind_contextvars(request_id=request_id)


def set_listener(listener_id: str) -> None:
    contextvars.bind_contextvars(listener_id=listener_id)
