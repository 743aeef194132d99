"""
Notewise Backend - Request ID Middleware
=========================================

What:  Tags every request with a short correlation ID.
How:   Reuses a well-formed X-Request-ID from the client or generates one,
       stores it in a ContextVar and request.state, and echoes it back in the
       response header.
Who:   Read by the access log, the exception handlers (`request_id` field of
       error bodies) and GeminiService (log prefixes).
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs are copied into logs and headers verbatim
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns the request ID before any other processing.

    A client-supplied ID is kept only if it is 1-64 characters of
    [A-Za-z0-9._-]; anything else is replaced with a fresh one.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        rid = incoming if _VALID_REQUEST_ID.match(incoming) else new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
