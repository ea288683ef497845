"""Storage model for the IP ban list (``content/banned-ips.json``).

The ban list is one flat JSON list of entries, unique by ``ip``.
"""

from dataclasses import dataclass
from typing import Any


DEFAULT_BAN_REASON = "No reason provided"
DEFAULT_BANNED_BY = "admin"


@dataclass
class BanEntry:
    """A banned client IP."""

    ip: str
    reason: str
    banned_at: str
    banned_by: str = DEFAULT_BANNED_BY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BanEntry":
        """Create BanEntry from a stored list entry.

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        ip = data["ip"]
        if not isinstance(ip, str) or not ip:
            msg = "Ban entry ip must be a non-empty string"
            raise ValueError(msg)
        return cls(
            ip=ip,
            reason=str(data.get("reason") or DEFAULT_BAN_REASON),
            banned_at=str(data.get("bannedAt") or ""),
            banned_by=str(data.get("bannedBy") or DEFAULT_BANNED_BY),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ip": self.ip,
            "reason": self.reason,
            "bannedAt": self.banned_at,
            "bannedBy": self.banned_by,
        }
