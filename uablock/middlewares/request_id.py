import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context variable used by log filter and error envelopes
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Client ids are echoed into headers and JSON logs
REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(header_value: str | None) -> str:
    """Return ``header_value`` when it is a safe id, else a fresh UUID."""
    if header_value and REQUEST_ID_RE.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id for blocked-request envelopes and logs."""

    async def dispatch(self, request: Request, call_next):
        req_id = resolve_request_id(request.headers.get("X-Request-ID"))
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response
