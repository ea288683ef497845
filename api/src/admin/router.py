"""Admin authentication endpoints.

Provides routes for:
- Login (password to session token)
- Logout and session verification
- Password change
"""

from fastapi import APIRouter

from src.core.errors import AppError, handle_app_error

from .dependencies import AdminAuthServiceDep, AdminSessionToken
from .schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    SuccessResponse,
    VerifyResponse,
)


router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse, summary="Admin login")
async def login(
    data: LoginRequest,
    auth_service: AdminAuthServiceDep,
) -> LoginResponse:
    """Exchange the admin password for a session token valid for 24 hours."""
    try:
        token, expires_at = await auth_service.login(data.password)
    except AppError as e:
        raise handle_app_error(e) from e
    return LoginResponse(token=token, expires_at=expires_at)


@router.post("/logout", response_model=SuccessResponse, summary="Admin logout")
async def logout(
    token: AdminSessionToken,
    auth_service: AdminAuthServiceDep,
) -> SuccessResponse:
    try:
        await auth_service.logout(token)
    except AppError as e:
        raise handle_app_error(e) from e
    return SuccessResponse()


@router.get("/verify", response_model=VerifyResponse, summary="Check admin session")
async def verify(_token: AdminSessionToken) -> VerifyResponse:
    return VerifyResponse()


@router.put("/password", response_model=SuccessResponse, summary="Change admin password")
async def change_password(
    data: ChangePasswordRequest,
    token: AdminSessionToken,
    auth_service: AdminAuthServiceDep,
) -> SuccessResponse:
    """Replace the admin password. Existing sessions stay valid."""
    try:
        await auth_service.change_password(token, data.current_password, data.new_password)
    except AppError as e:
        raise handle_app_error(e) from e
    return SuccessResponse()
