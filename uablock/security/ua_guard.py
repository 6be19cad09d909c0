"""Route-level User-Agent check.

Use :func:`require_allowed_agent` as a FastAPI dependency on routes that
should reject blocked agents without installing the middleware app-wide.
Raise ``HTTPException`` with HTTP 403 when the agent is blocked.
"""

from __future__ import annotations

from fastapi import HTTPException, Request
from starlette.status import HTTP_403_FORBIDDEN, HTTP_503_SERVICE_UNAVAILABLE

from ..utils.responses import err
from .blocker import UserAgentBlocker, denial_message


def get_blocker(request: Request) -> UserAgentBlocker:
    """Return the blocker stored on the application state."""
    blocker = getattr(request.app.state, "ua_blocker", None)
    if blocker is None:
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            detail=err("UA_BLOCKER_MISSING", "User agent blocker not configured"),
        )
    return blocker


async def require_allowed_agent(request: Request) -> None:
    """Raise ``HTTPException`` if the request's User-Agent is blocked."""

    ua = request.headers.get("User-Agent")
    if not ua:
        return
    pattern = get_blocker(request).block_reason(ua)
    if pattern is not None:
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN,
            detail=err("UA_BLOCKED", denial_message(pattern)),
        )
