"""IP ban list management.

Ban checks on the comment write path fail open: if the ban list cannot be
read, the write is allowed and a warning is logged. Ban and unban read the
list strictly, so a degraded empty list is never written back.
"""

import structlog

from src.core.errors import ConflictError, NotFoundError, ValidationError
from src.storage.keys import BANNED_IPS_KEY
from src.storage.service import BlobStore, StorageUnavailableError
from src.utils.timestamps import format_timestamp, utc_now

from .models import DEFAULT_BAN_REASON, DEFAULT_BANNED_BY, BanEntry


logger = structlog.get_logger(__name__)


class BanService:
    """Reads and writes the flat IP ban list."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def _load(self) -> list[BanEntry]:
        """Read the ban list, skipping malformed entries.

        Raises:
            StorageUnavailableError: If the backend fails
        """
        document = await self.store.get(BANNED_IPS_KEY, list)
        if document is None:
            return []

        entries = []
        for raw in document:
            try:
                entries.append(BanEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("ban_entry_malformed", error=str(e))
        return entries

    async def _save(self, entries: list[BanEntry]) -> None:
        await self.store.put(BANNED_IPS_KEY, [entry.to_dict() for entry in entries])

    async def is_banned(self, ip: str) -> bool:
        """Exact-match lookup of a client IP; False if the list is unreadable."""
        try:
            entries = await self._load()
        except StorageUnavailableError as e:
            logger.warning("ban_list_unreadable", error=e.message)
            return False
        return any(entry.ip == ip for entry in entries)

    async def list_bans(self) -> list[BanEntry]:
        return await self._load()

    async def ban(self, ip: str, reason: str | None = None) -> BanEntry:
        """Add an IP to the ban list.

        Args:
            ip: Client IP (trimmed, must be non-empty)
            reason: Free text; defaults to "No reason provided"

        Returns:
            The new ban entry

        Raises:
            ValidationError: If ip is blank
            ConflictError: If ip is already banned
        """
        ip = (ip or "").strip()
        if not ip:
            msg = "IP address is required"
            raise ValidationError(msg)

        entries = await self._load()
        if any(entry.ip == ip for entry in entries):
            msg = "IP is already banned"
            raise ConflictError(msg)

        entry = BanEntry(
            ip=ip,
            reason=(reason or "").strip() or DEFAULT_BAN_REASON,
            banned_at=format_timestamp(utc_now()),
            banned_by=DEFAULT_BANNED_BY,
        )
        entries.append(entry)
        await self._save(entries)

        logger.info("ip_banned", banned_ip=ip, reason=entry.reason)
        return entry

    async def unban(self, ip: str) -> None:
        """Remove an IP from the ban list.

        Raises:
            ValidationError: If ip is blank
            NotFoundError: If ip is not banned
        """
        ip = (ip or "").strip()
        if not ip:
            msg = "IP address is required"
            raise ValidationError(msg)

        entries = await self._load()
        remaining = [entry for entry in entries if entry.ip != ip]
        if len(remaining) == len(entries):
            msg = "IP is not banned"
            raise NotFoundError(msg)

        await self._save(remaining)
        logger.info("ip_unbanned", banned_ip=ip)
