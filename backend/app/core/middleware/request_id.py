from __future__ import annotations

import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from structlog import contextvars

from app.core.middleware.context import set_request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Scope structlog context vars to one request and echo its id back."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        contextvars.clear_contextvars()
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        set_request_id(request_id)
        contextvars.bind_contextvars(http_method=request.method, http_path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            contextvars.unbind_contextvars("http_method", "http_path")
        response.headers[self.header_name] = request_id
        return response
