"""Request-scoped middleware for API requests."""

import re
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

_INBOUND_ID = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an ID, echoed back as X-Request-ID.

    An ID set by the reverse proxy is kept when it looks sane, so proxy and
    service logs line up.
    """

    async def dispatch(self, request: Request, call_next):
        inbound = request.headers.get("x-request-id", "")
        request_id = inbound if _INBOUND_ID.match(inbound) else str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
