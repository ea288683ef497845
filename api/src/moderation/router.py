"""IP ban management endpoints (admin only)."""

from fastapi import APIRouter, status

from src.admin.dependencies import AdminSessionToken
from src.core.errors import AppError, handle_app_error

from .dependencies import BanServiceDep
from .schemas import BanEntryResponse, BanRequest, SuccessResponse, UnbanRequest


router = APIRouter(prefix="/admin/bans", tags=["admin"])


@router.get("", response_model=list[BanEntryResponse], summary="List banned IPs")
async def list_bans(
    ban_service: BanServiceDep,
    _admin: AdminSessionToken,
) -> list[BanEntryResponse]:
    try:
        entries = await ban_service.list_bans()
    except AppError as e:
        raise handle_app_error(e) from e
    return [BanEntryResponse.from_entry(entry) for entry in entries]


@router.post(
    "",
    response_model=BanEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ban an IP",
)
async def ban_ip(
    data: BanRequest,
    ban_service: BanServiceDep,
    _admin: AdminSessionToken,
) -> BanEntryResponse:
    """Ban a client IP from commenting. Existing comments are kept."""
    try:
        entry = await ban_service.ban(data.ip, data.reason)
    except AppError as e:
        raise handle_app_error(e) from e
    return BanEntryResponse.from_entry(entry)


@router.delete("", response_model=SuccessResponse, summary="Unban an IP")
async def unban_ip(
    data: UnbanRequest,
    ban_service: BanServiceDep,
    _admin: AdminSessionToken,
) -> SuccessResponse:
    try:
        await ban_service.unban(data.ip)
    except AppError as e:
        raise handle_app_error(e) from e
    return SuccessResponse()
