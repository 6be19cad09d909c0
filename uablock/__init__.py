"""User-Agent blocklist for HTTP and CGI request filtering."""

from .security.blocker import DEFAULT_PATTERNS, UserAgentBlocker, denial_message

__all__ = ["DEFAULT_PATTERNS", "UserAgentBlocker", "denial_message"]
