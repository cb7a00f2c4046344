# manage_backend/adapters/inbound/api/v1/endpoints/auth_endpoint.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from manage_backend.adapters.inbound.api.deps import get_auth_service, get_current_identity
from manage_backend.application.dtos.auth_dto import (
    LoginRequest,
    LogoutRequest,
    MessageOutput,
    RefreshTokenOutput,
    RefreshTokenRequest,
    TokenData,
)
from manage_backend.application.dtos.user_dto import UserCreate, UserOutput
from manage_backend.application.use_cases.auth_use_cases import AsyncAuthService
from manage_backend.domain.models.token_domain_model import Identity

logger = logging.getLogger(__name__)
router = APIRouter()

UNAUTHORIZED_RESPONSE = {
    401: {
        "description": "Not authenticated",
        "content": {
            "application/json": {
                "example": {"detail": "Could not validate credentials", "code": "UNAUTHORIZED"}
            }
        },
    }
}


@router.post(
    "/register",
    response_model=UserOutput,
    status_code=status.HTTP_201_CREATED,
    summary="Register User - Creates a new user",
    description="Creates a new account with the `user` role. Username and email must be unique.",
    responses={
        409: {
            "description": "Username or email already in use",
            "content": {
                "application/json": {
                    "example": {"detail": "Username already exists", "code": "RESOURCE_ALREADY_EXISTS"}
                }
            },
        }
    },
)
async def register_user(
        user_input: UserCreate,
        service: AsyncAuthService = Depends(get_auth_service),
):
    return await service.register(user_input)


@router.post(
    "/login",
    response_model=TokenData,
    summary="Login User - Generates access and refresh tokens",
    description=(
            "Authenticates a user (username/password), opens a session and returns "
            "a token pair. Logging in again replaces the previous session."
    ),
    responses={
        401: {
            "description": "Invalid credentials",
            "content": {
                "application/json": {
                    "example": {"detail": "Invalid username or password", "code": "INVALID_CREDENTIALS"}
                }
            },
        }
    },
)
async def login_user(
        credentials: LoginRequest,
        request: Request,
        service: AsyncAuthService = Depends(get_auth_service),
):
    return await service.login(
        credentials.username,
        credentials.password,
        device_info=credentials.device_info or "",
        ip_address=request.client.host if request.client else "",
        user_agent=request.headers.get("User-Agent", ""),
    )


@router.post(
    "/refresh",
    response_model=RefreshTokenOutput,
    summary="Refresh Token - Renews the access token",
    description=(
            "Exchanges the session's current refresh token for a new access token. "
            "The returned refresh token replaces the presented one."
    ),
    responses=UNAUTHORIZED_RESPONSE,
)
async def refresh_token(
        refresh_data: RefreshTokenRequest,
        service: AsyncAuthService = Depends(get_auth_service),
):
    return await service.refresh(refresh_data.refresh_token)


@router.post(
    "/logout",
    response_model=MessageOutput,
    status_code=status.HTTP_200_OK,
    summary="Logout - Revoke current tokens",
    description=(
            "Blacklists the current access token (and the refresh token, if sent) "
            "and deletes the session."
    ),
    responses=UNAUTHORIZED_RESPONSE,
)
async def logout_user(
        body: Optional[LogoutRequest] = None,
        identity: Identity = Depends(get_current_identity),
        service: AsyncAuthService = Depends(get_auth_service),
):
    await service.logout(
        identity.user_id,
        identity.access_token,
        body.refresh_token if body else None,
    )
    return MessageOutput(message="Successfully logged out.")
