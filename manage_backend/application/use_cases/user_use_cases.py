# manage_backend/application/use_cases/user_use_cases.py

"""
Service for user management.

This module implements profile handling, administration, availability
checks and the public read-only views over users.
"""

import logging
from typing import Optional

from fastapi_pagination import Page, Params

from manage_backend.application.dtos.user_dto import (
    AdminUserCreate,
    AvailabilityOutput,
    AvailabilityRequest,
    AvailabilityResult,
    PublicUserOutput,
    UserListOutput,
    UserOutput,
    UserSelfUpdate,
    UserUpdate,
)
from manage_backend.application.ports.inbound import IUserUseCase
from manage_backend.application.ports.outbound import IPasswordHasher, IUserRepository
from manage_backend.domain.exceptions import (
    InvalidCredentialsException,
    InvalidInputException,
    PermissionDeniedException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)
from manage_backend.domain.models.user_domain_model import User

logger = logging.getLogger(__name__)

PUBLIC_MAX_PAGE_SIZE = 50


def _offset(params: Params) -> int:
    return (params.page - 1) * params.size


class AsyncUserService(IUserUseCase):
    """
    Service for user management.

    Args:
        users: user repository
        passwords: password KDF, used for profile password changes and
            administrator-created accounts
    """

    def __init__(self, users: IUserRepository, passwords: IPasswordHasher):
        self.users = users
        self.passwords = passwords

    async def _get_user_by_id(self, user_id: int) -> User:
        """
        Raises:
            ResourceNotFoundException: If the user is not found
        """
        user = await self.users.get(user_id)
        if user is None:
            logger.warning(f"User not found: ID {user_id}")
            raise ResourceNotFoundException(detail="User not found", resource_id=user_id)
        return user

    async def _ensure_unique(
            self,
            username: Optional[str] = None,
            email: Optional[str] = None,
            exclude_id: Optional[int] = None,
    ) -> None:
        if username is not None and await self.users.username_exists(username, exclude_id=exclude_id):
            raise ResourceAlreadyExistsException(detail="Username already exists")
        if email is not None and await self.users.email_exists(email, exclude_id=exclude_id):
            raise ResourceAlreadyExistsException(detail="Email already exists")

    ####################################################################
    # Profile
    ####################################################################

    async def get_profile(self, user_id: int) -> UserOutput:
        return UserOutput.model_validate(await self._get_user_by_id(user_id))

    async def update_profile(self, user_id: int, data: UserSelfUpdate) -> UserOutput:
        """
        Allow a user to update their own email and password.

        Raises:
            ResourceNotFoundException: If the user is not found
            InvalidCredentialsException: If the current password is missing or wrong
            ResourceAlreadyExistsException: If the new email is already in use
        """
        user = await self._get_user_by_id(user_id)
        changes = {}

        if data.password:
            if not data.current_password:
                logger.warning(f"Password change without current password: user {user_id}")
                raise InvalidCredentialsException(
                    detail="To change the password, you must provide the current password."
                )
            if not await self.passwords.verify_password(data.current_password, user.password):
                logger.warning(f"Incorrect current password on profile update: user {user_id}")
                raise InvalidCredentialsException(detail="Current password incorrect.")
            changes["password"] = await self.passwords.hash_password(data.password)

        if data.email is not None and data.email != user.email:
            await self._ensure_unique(email=data.email, exclude_id=user_id)
            changes["email"] = data.email

        if not changes:
            return UserOutput.model_validate(user)

        updated = await self.users.update(user_id, changes)
        logger.info(f"User updated their profile: {updated.username}")
        return UserOutput.model_validate(updated)

    ####################################################################
    # Administration
    ####################################################################

    async def list_users(self, params: Params) -> Page[UserListOutput]:
        """Paginated list of users, newest first."""
        users, total = await self.users.list(offset=_offset(params), limit=params.size)
        items = [UserListOutput.model_validate(u) for u in users]
        return Page[UserListOutput].create(items, params, total=total)

    async def get_user(self, user_id: int) -> UserOutput:
        return UserOutput.model_validate(await self._get_user_by_id(user_id))

    async def create_user(self, data: AdminUserCreate) -> UserOutput:
        """
        Raises:
            ResourceAlreadyExistsException: If the username or email is taken
        """
        await self._ensure_unique(username=data.username, email=data.email)
        user = await self.users.create({
            "username": data.username,
            "email": data.email,
            "password": await self.passwords.hash_password(data.password),
            "role": data.role,
        })
        logger.info(f"Administrator created user {user.username} (ID {user.id})")
        return UserOutput.model_validate(user)

    async def update_user(self, user_id: int, data: UserUpdate) -> UserOutput:
        """
        Allow an administrator to update username, email, role and status.

        Raises:
            ResourceNotFoundException: If the user is not found
            ResourceAlreadyExistsException: If the new username or email is in use
        """
        user = await self._get_user_by_id(user_id)
        changes = data.changes()
        if not changes:
            return UserOutput.model_validate(user)

        await self._ensure_unique(
            username=changes.get("username"),
            email=changes.get("email"),
            exclude_id=user_id,
        )
        updated = await self.users.update(user_id, changes)
        logger.info(f"Administrator updated user {user_id}: {sorted(changes)}")
        return UserOutput.model_validate(updated)

    async def delete_user(self, user_id: int, current_user_id: int) -> None:
        """
        Raises:
            PermissionDeniedException: If a user tries to delete themselves
            ResourceNotFoundException: If the user is not found
        """
        if user_id == current_user_id:
            raise PermissionDeniedException(detail="You cannot delete your own user")
        await self._get_user_by_id(user_id)
        await self.users.delete(user_id)
        logger.info(f"User {user_id} deleted by user {current_user_id}")

    ####################################################################
    # Availability
    ####################################################################

    async def check_username(self, username: str, exclude_user_id: Optional[int] = None) -> AvailabilityResult:
        taken = await self.users.username_exists(username, exclude_id=exclude_user_id)
        return AvailabilityResult(
            available=not taken,
            message="Username is already taken" if taken else "Username is available",
        )

    async def check_email(self, email: str, exclude_user_id: Optional[int] = None) -> AvailabilityResult:
        taken = await self.users.email_exists(email, exclude_id=exclude_user_id)
        return AvailabilityResult(
            available=not taken,
            message="Email is already taken" if taken else "Email is available",
        )

    async def check_availability(self, request: AvailabilityRequest) -> AvailabilityOutput:
        """
        Raises:
            InvalidInputException: If neither username nor email is given
        """
        if not request.username and not request.email:
            raise InvalidInputException(detail="Provide a username or an email to check")

        exclude_id = request.exclude_user_id if request.exclude_user_id and request.exclude_user_id > 0 else None
        result = AvailabilityOutput()
        if request.username:
            result.username = await self.check_username(request.username, exclude_id)
        if request.email:
            result.email = await self.check_email(request.email, exclude_id)
        return result

    ####################################################################
    # Public views
    ####################################################################

    async def get_public_user(self, user_id: int) -> PublicUserOutput:
        return PublicUserOutput.model_validate(await self._get_user_by_id(user_id))

    async def list_public_users(self, params: Params) -> Page[PublicUserOutput]:
        """Same ordering as ``list_users``; page size is capped at 50."""
        params = Params(page=params.page, size=min(params.size, PUBLIC_MAX_PAGE_SIZE))
        users, total = await self.users.list(offset=_offset(params), limit=params.size)
        items = [PublicUserOutput.model_validate(u) for u in users]
        return Page[PublicUserOutput].create(items, params, total=total)
