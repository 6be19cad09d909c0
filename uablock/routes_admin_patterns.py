"""Endpoints for inspecting and editing the User-Agent blocklist at runtime."""

from __future__ import annotations

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from config import get_settings

from .security.blocker import UserAgentBlocker, is_valid_pattern
from .security.ua_guard import get_blocker
from .utils.responses import err, ok

router = APIRouter(prefix="/admin/patterns")


def require_admin(
    request: Request, x_admin_token: str | None = Header(default=None)
) -> None:
    """Reject callers without the configured ``X-Admin-Token``."""
    settings = getattr(request.app.state, "settings", None) or get_settings()
    expected = settings.admin_token
    if not expected or not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN,
            detail=err("ADMIN_FORBIDDEN", "Admin token required"),
        )


class PatternIn(BaseModel):
    pattern: str


@router.get("", dependencies=[Depends(require_admin)])
async def list_patterns(blocker: UserAgentBlocker = Depends(get_blocker)) -> dict:
    """Return all current patterns."""
    return ok({"patterns": blocker.get_patterns(), "file": blocker.backing_path})


@router.get("/check", dependencies=[Depends(require_admin)])
async def check_agent(ua: str, blocker: UserAgentBlocker = Depends(get_blocker)) -> dict:
    """Report whether ``ua`` would be blocked and by which pattern."""
    reason = blocker.block_reason(ua)
    return ok({"blocked": reason is not None, "pattern": reason})


@router.post("", dependencies=[Depends(require_admin)])
async def add_pattern(
    payload: PatternIn, blocker: UserAgentBlocker = Depends(get_blocker)
):
    pattern = payload.pattern.strip().lower()
    if not pattern:
        return JSONResponse(
            err("PATTERN_EMPTY", "Pattern must not be blank"),
            status_code=422,
        )
    if not is_valid_pattern(pattern):
        return JSONResponse(
            err(
                "PATTERN_INVALID",
                "Pattern must be a single line",
                hint="send one pattern per request",
            ),
            status_code=422,
        )
    if not blocker.add_pattern(pattern):
        return JSONResponse(
            err("PATTERN_EXISTS", f"Pattern '{pattern}' is already blocked"),
            status_code=HTTP_409_CONFLICT,
        )
    return JSONResponse(ok({"pattern": pattern}), status_code=HTTP_201_CREATED)


@router.delete("/{pattern:path}", dependencies=[Depends(require_admin)])
async def remove_pattern(
    pattern: str, blocker: UserAgentBlocker = Depends(get_blocker)
):
    if not blocker.remove_pattern(pattern):
        return JSONResponse(
            err("PATTERN_NOT_FOUND", f"Pattern '{pattern}' is not blocked"),
            status_code=HTTP_404_NOT_FOUND,
        )
    return ok({"pattern": pattern.strip().lower()})
