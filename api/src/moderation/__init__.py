"""IP ban moderation module."""

from .models import BanEntry
from .service import BanService


__all__ = ["BanEntry", "BanService"]
