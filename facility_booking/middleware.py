"""
Request correlation for booking API calls.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a request ID.

    A caller-supplied ``X-Request-ID`` is reused (so a gateway or the admin UI
    can trace one booking attempt across services); otherwise a UUID4 is
    generated. The ID is stored on ``request.state``, bound to structlog
    contextvars for every log line of the request, and echoed back in the
    response header.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH:
            request_id = incoming
        else:
            request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
