"""Reject requests whose User-Agent matches the blocklist."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.status import HTTP_403_FORBIDDEN

from ..security.blocker import UserAgentBlocker, denial_message
from ..utils.responses import err

logger = logging.getLogger("api")


class UserAgentFilterMiddleware(BaseHTTPMiddleware):
    """Deny requests from blocked user agents before they reach a route.

    The blocker is either passed in directly or looked up on
    ``request.app.state.ua_blocker`` for every request, which lets the admin
    routes swap or mutate it at runtime.
    """

    def __init__(
        self,
        app,
        blocker: Optional[UserAgentBlocker] = None,
        status_code: int = HTTP_403_FORBIDDEN,
        exempt_paths: Iterable[str] = (),
    ):
        super().__init__(app)
        self.blocker = blocker
        self.status_code = status_code
        self.exempt_paths = frozenset(exempt_paths)

    def _blocker(self, request: Request) -> Optional[UserAgentBlocker]:
        if self.blocker is not None:
            return self.blocker
        return getattr(request.app.state, "ua_blocker", None)

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.exempt_paths:
            return await call_next(request)
        ua = request.headers.get("User-Agent")
        blocker = self._blocker(request)
        if ua and blocker is not None:
            pattern = blocker.block_reason(ua)
            if pattern is not None:
                logger.info(
                    "blocked user agent",
                    extra={
                        "route": request.url.path,
                        "status": self.status_code,
                        "pattern": pattern,
                    },
                )
                return JSONResponse(
                    err("UA_BLOCKED", denial_message(pattern)),
                    status_code=self.status_code,
                )
        return await call_next(request)
