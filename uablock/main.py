# main.py

"""FastAPI application guarded by the User-Agent blocklist."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from config import Settings, get_settings

from .middlewares import RequestIdMiddleware, UserAgentFilterMiddleware
from .routes_admin_patterns import router as admin_patterns_router
from .security.blocker import UserAgentBlocker
from .utils.responses import ok

logger = logging.getLogger("api")


def load_blocker(settings: Settings) -> UserAgentBlocker:
    """Build the blocker described by ``settings``.

    A configured ``ua_block_file`` that cannot be read aborts start-up.
    """

    if settings.ua_block_file:
        blocker = UserAgentBlocker.from_file(settings.ua_block_file)
        logger.info(
            "loaded %d user agent patterns from %s",
            len(blocker),
            settings.ua_block_file,
        )
        return blocker
    return UserAgentBlocker()


def create_app(
    blocker: Optional[UserAgentBlocker] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="uablock")
    app.state.settings = settings
    app.state.ua_blocker = blocker if blocker is not None else load_blocker(settings)

    # Added last so it wraps the filter and blocked responses carry the id.
    app.add_middleware(
        UserAgentFilterMiddleware,
        status_code=settings.ua_block_status,
        exempt_paths=settings.exempt_paths,
    )
    app.add_middleware(RequestIdMiddleware)
    app.include_router(admin_patterns_router)

    @app.get("/health")
    async def health() -> dict:
        return ok({"status": "ok"})

    return app
