"""Request ID middleware for tracing preview requests.

A caller-supplied X-Request-ID is reused only when it is a short token of
safe characters; anything else (oversized, spaces, control characters) is
replaced with a fresh id so it cannot be used to forge log lines. The id is
kept in a ContextVar for the JSON log formatter and echoed on the response.
"""

import contextvars
import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._\-]{1,64}")

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def accept_request_id(candidate: str | None) -> str:
    """Return the inbound id when it is safe to log, otherwise a new one."""
    if candidate and _VALID_REQUEST_ID.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            request_id_var.reset(token)


def get_request_id() -> str:
    """Get the current request ID (empty string outside a request)."""
    return request_id_var.get()
