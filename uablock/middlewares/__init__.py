from .request_id import RequestIdMiddleware
from .ua_filter import UserAgentFilterMiddleware

__all__ = [
    "RequestIdMiddleware",
    "UserAgentFilterMiddleware",
]
