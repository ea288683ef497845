"""Admin authentication module.

Single admin password, opaque session tokens with a fixed TTL.

Note: Router is not exported here to avoid circular imports.
"""

from .models import AdminConfig, AdminSession
from .service import AdminAuthService
from .sessions import InMemorySessionStore, RedisSessionStore, SessionStore


__all__ = [
    "AdminAuthService",
    "AdminConfig",
    "AdminSession",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
]
