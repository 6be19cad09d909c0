"""Helpers for plain CGI scripts.

A CGI script builds a :class:`~uablock.security.blocker.UserAgentBlocker`
once, calls :func:`run_cgi` first thing and stops when it returns ``False``::

    blocker = UserAgentBlocker.from_file("/etc/uablock/patterns.txt")
    if not run_cgi(blocker):
        sys.exit(0)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional, TextIO

from .security.blocker import UserAgentBlocker, denial_message

logger = logging.getLogger("uablock")

STATUS_TEXT = {200: "OK", 403: "Forbidden"}


def check_user_agent(blocker: UserAgentBlocker, user_agent: str) -> bool:
    """Return ``True`` if the request should be allowed."""
    return not blocker.should_block(user_agent)


def generate_response(blocker: UserAgentBlocker, user_agent: str) -> tuple[int, str]:
    """Return ``(status, body)``; an empty body means continue processing."""
    pattern = blocker.block_reason(user_agent)
    if pattern is not None:
        return 403, denial_message(pattern)
    return 200, ""


def run_cgi(
    blocker: UserAgentBlocker,
    environ: Optional[Mapping[str, str]] = None,
    out: Optional[TextIO] = None,
) -> bool:
    """Check ``HTTP_USER_AGENT`` and write a rejection when it is blocked.

    Returns ``True`` when the script may go on producing its own response.
    """

    environ = os.environ if environ is None else environ
    out = sys.stdout if out is None else out
    user_agent = environ.get("HTTP_USER_AGENT", "")
    if not user_agent:
        return True
    status, body = generate_response(blocker, user_agent)
    if status == 200:
        return True
    logger.info("blocked CGI request", extra={"status": status})
    out.write(f"Status: {status} {STATUS_TEXT.get(status, '')}\r\n")
    out.write("Content-Type: text/plain; charset=utf-8\r\n\r\n")
    out.write(body + "\n")
    out.flush()
    return False
