# manage_backend/application/dtos/auth_dto.py

"""
DTOs for authentication requests and token responses.
"""

from typing import Optional

from pydantic import Field

from manage_backend.application.dtos.base_dto import CustomBaseModel
from manage_backend.application.dtos.user_dto import UserOutput


class LoginRequest(CustomBaseModel):
    username: str = Field(..., min_length=1, description="Username.")
    password: str = Field(..., min_length=1, description="Password.")
    device_info: Optional[str] = Field(None, description="Free-form client device description.")


class TokenData(CustomBaseModel):
    """
    DTO for a login response: token pair plus a safe user summary.
    """
    access_token: str = Field(..., description="JWT access token.")
    refresh_token: str = Field(..., description="Refresh token used to obtain new access tokens.")
    token_type: str = "Bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds.")
    refresh_expires_in: int = Field(..., description="Refresh token lifetime in seconds.")
    user: UserOutput


class RefreshTokenRequest(CustomBaseModel):
    """
    DTO for refresh token requests.
    """
    refresh_token: str = Field(..., min_length=1, description="Current refresh token.")


class RefreshTokenOutput(CustomBaseModel):
    """
    New access token and its lifetime. The superseding refresh token is
    returned as well, since the presented one stops matching the session.
    """
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: str
    refresh_expires_in: int


class LogoutRequest(CustomBaseModel):
    refresh_token: Optional[str] = Field(None, description="Refresh token to revoke as well.")


class MessageOutput(CustomBaseModel):
    message: str
