# manage_backend/application/use_cases/auth_use_cases.py

"""
Service for user authentication.

This module implements registration, login, token refresh and logout on
top of the session manager and token codec.
"""

import logging
from typing import Optional

from manage_backend.application.dtos.auth_dto import RefreshTokenOutput, TokenData
from manage_backend.application.dtos.user_dto import UserCreate, UserOutput
from manage_backend.application.ports.inbound import IAuthUseCase
from manage_backend.application.ports.outbound import (
    IPasswordHasher,
    ISessionManager,
    ITokenCodec,
    IUserRepository,
)
from manage_backend.domain.exceptions import (
    InvalidCredentialsException,
    InvalidRefreshTokenException,
    InvalidTokenException,
    ResourceAlreadyExistsException,
    SessionNotFoundException,
    StoreUnavailableException,
)
from manage_backend.domain.models.user_domain_model import ROLE_USER
from manage_backend.domain.services.permission_service import PermissionService
from manage_backend.shared.utils.best_effort import best_effort

logger = logging.getLogger(__name__)


class AsyncAuthService(IAuthUseCase):
    """
    Service for user authentication.

    Args:
        users: user repository
        codec: token codec
        sessions: session manager
        passwords: password KDF
    """

    def __init__(
            self,
            users: IUserRepository,
            codec: ITokenCodec,
            sessions: ISessionManager,
            passwords: IPasswordHasher,
    ):
        self.users = users
        self.codec = codec
        self.sessions = sessions
        self.passwords = passwords

    async def register(self, user_input: UserCreate, role: str = ROLE_USER) -> UserOutput:
        """
        Register a new user in the system.

        Raises:
            ResourceAlreadyExistsException: If the username or email is taken
        """
        if await self.users.username_exists(user_input.username):
            logger.warning(f"Registration with existing username: {user_input.username}")
            raise ResourceAlreadyExistsException(detail="Username already exists")
        if await self.users.email_exists(user_input.email):
            logger.warning(f"Registration with existing email: {user_input.email}")
            raise ResourceAlreadyExistsException(detail="Email already exists")

        user = await self.users.create({
            "username": user_input.username,
            "email": user_input.email,
            "password": await self.passwords.hash_password(user_input.password),
            "role": role,
        })
        logger.info(f"User registered: {user.username} (ID {user.id})")
        return UserOutput.model_validate(user)

    async def login(
            self,
            username: str,
            password: str,
            device_info: str = "",
            ip_address: str = "",
            user_agent: str = "",
    ) -> TokenData:
        """
        Authenticate a user, open a session and return a token pair.

        Unknown usernames, wrong passwords and disabled accounts all raise
        the same exception.

        Raises:
            InvalidCredentialsException: If the credentials are not accepted
            StoreUnavailableException: If the session could not be created
        """
        user = await self.users.get_by_username(username)
        if user is None or not await self.passwords.verify_password(password, user.password):
            logger.warning(f"Failed login for username '{username}'")
            raise InvalidCredentialsException()
        if not user.is_active:
            logger.warning(f"Login attempt on inactive account '{username}'")
            raise InvalidCredentialsException()

        pair = self.codec.issue_pair(user.id, user.username, user.role)

        await self.sessions.create_session(
            user.id, user.username, pair.refresh_token, device_info, ip_address, user_agent
        )
        await self.sessions.set_active(user.id)
        await best_effort(
            self.sessions.cache_permissions(user.id, user.role, PermissionService.permissions_for_role(user.role)),
            action=f"cache permissions for user {user.id}",
        )

        logger.info(f"User logged in: {user.username} (ID {user.id})")
        return TokenData(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_in=pair.expires_in,
            refresh_expires_in=pair.refresh_expires_in,
            user=UserOutput.model_validate(user),
        )

    async def refresh(self, refresh_token: str) -> RefreshTokenOutput:
        """
        Exchange the session's current refresh token for a new pair.

        Validation and the session overwrite are separate store calls, so two
        concurrent refreshes with the same token can both succeed; the later
        write decides which refresh token stays valid.

        Raises:
            AuthenticationException: If the refresh token is not accepted
            StoreUnavailableException: If the session cannot be read or written
        """
        record = await self.sessions.validate_refresh(refresh_token)

        user = await self.users.get(record.user_id)
        if user is None or not user.is_active:
            logger.warning(f"Refresh for missing or inactive user {record.user_id}")
            raise InvalidRefreshTokenException(detail="User not found or inactive")

        pair = self.codec.issue_pair(user.id, user.username, user.role)
        await self.sessions.create_session(
            user.id,
            user.username,
            pair.refresh_token,
            record.device_info,
            record.ip_address,
            record.user_agent,
        )
        await best_effort(
            self.sessions.update_last_activity(user.id),
            action=f"update last activity for user {user.id}",
            tolerate=(SessionNotFoundException, StoreUnavailableException),
        )

        return RefreshTokenOutput(
            access_token=pair.access_token,
            expires_in=pair.expires_in,
            refresh_token=pair.refresh_token,
            refresh_expires_in=pair.refresh_expires_in,
        )

    async def _revoke_refresh_token(self, user_id: int, refresh_token: str) -> None:
        claims = self.codec.verify_refresh(refresh_token)
        if claims.user_id != user_id:
            logger.warning(f"User {user_id} presented a refresh token of user {claims.user_id} at logout")
            return
        await self.sessions.blacklist(claims.token_id, self.codec.time_remaining(claims))

    async def logout(self, user_id: int, access_token: str, refresh_token: Optional[str] = None) -> None:
        """
        Revoke the access token, optionally the refresh token, and delete the session.

        Failures revoking the refresh token are logged and ignored.

        Raises:
            InvalidTokenException: If the access token does not verify
            StoreUnavailableException: If the access token cannot be blacklisted
                or the session cannot be deleted
        """
        claims = self.codec.verify(access_token)
        await self.sessions.blacklist(claims.token_id, self.codec.time_remaining(claims))

        if refresh_token:
            await best_effort(
                self._revoke_refresh_token(user_id, refresh_token),
                action=f"revoke refresh token of user {user_id}",
                tolerate=(InvalidTokenException, StoreUnavailableException),
            )

        await self.sessions.delete_session(user_id)
        logger.info(f"User {user_id} logged out")
