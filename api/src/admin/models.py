"""Admin credential document (``content/admin.json``) and session record."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class AdminConfig:
    """Stored admin configuration.

    Unknown fields are kept in ``extra`` and written back unchanged.
    """

    password_hash: str | None = None
    last_login: str | None = None
    previous_login: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AdminConfig":
        known = {"passwordHash", "lastLogin", "previousLogin"}
        password_hash = data.get("passwordHash")
        last_login = data.get("lastLogin")
        previous_login = data.get("previousLogin")
        return cls(
            password_hash=password_hash if isinstance(password_hash, str) and password_hash else None,
            last_login=last_login if isinstance(last_login, str) else None,
            previous_login=previous_login if isinstance(previous_login, str) else None,
            extra={key: value for key, value in data.items() if key not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.extra)
        if self.password_hash:
            result["passwordHash"] = self.password_hash
        if self.last_login:
            result["lastLogin"] = self.last_login
        if self.previous_login:
            result["previousLogin"] = self.previous_login
        return result


@dataclass
class AdminSession:
    """An admin session; valid for a fixed TTL from ``created_at``."""

    token: str
    created_at: datetime
