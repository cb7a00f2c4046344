# manage_backend/application/ports/inbound.py

from abc import ABC, abstractmethod
from typing import Optional

from fastapi_pagination import Page, Params

from manage_backend.application.dtos.auth_dto import RefreshTokenOutput, TokenData
from manage_backend.application.dtos.user_dto import (
    AdminUserCreate,
    AvailabilityOutput,
    AvailabilityRequest,
    PublicUserOutput,
    UserCreate,
    UserListOutput,
    UserOutput,
    UserSelfUpdate,
    UserUpdate,
)


class IAuthUseCase(ABC):
    """Interface for authentication use cases."""

    @abstractmethod
    async def register(self, user_input: UserCreate) -> UserOutput:
        """Register a new user."""
        pass

    @abstractmethod
    async def login(
            self,
            username: str,
            password: str,
            device_info: str = "",
            ip_address: str = "",
            user_agent: str = "",
    ) -> TokenData:
        """Authenticate a user and open a session."""
        pass

    @abstractmethod
    async def refresh(self, refresh_token: str) -> RefreshTokenOutput:
        """Exchange the current refresh token for a new access token."""
        pass

    @abstractmethod
    async def logout(self, user_id: int, access_token: str, refresh_token: Optional[str] = None) -> None:
        """Revoke the presented tokens and close the session."""
        pass


class IUserUseCase(ABC):
    """Interface for user-related use cases."""

    @abstractmethod
    async def get_profile(self, user_id: int) -> UserOutput:
        pass

    @abstractmethod
    async def update_profile(self, user_id: int, data: UserSelfUpdate) -> UserOutput:
        pass

    @abstractmethod
    async def list_users(self, params: Params) -> Page[UserListOutput]:
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> UserOutput:
        pass

    @abstractmethod
    async def create_user(self, data: AdminUserCreate) -> UserOutput:
        pass

    @abstractmethod
    async def update_user(self, user_id: int, data: UserUpdate) -> UserOutput:
        pass

    @abstractmethod
    async def delete_user(self, user_id: int, current_user_id: int) -> None:
        pass

    @abstractmethod
    async def check_availability(self, request: AvailabilityRequest) -> AvailabilityOutput:
        pass

    @abstractmethod
    async def get_public_user(self, user_id: int) -> PublicUserOutput:
        pass

    @abstractmethod
    async def list_public_users(self, params: Params) -> Page[PublicUserOutput]:
        pass
