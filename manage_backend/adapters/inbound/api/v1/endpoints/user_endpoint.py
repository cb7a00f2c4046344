# manage_backend/adapters/inbound/api/v1/endpoints/user_endpoint.py

import logging

from fastapi import APIRouter, Depends, Path, status
from fastapi_pagination import Page, Params

from manage_backend.adapters.inbound.api.deps import (
    get_current_identity,
    get_user_service,
    require_permission,
)
from manage_backend.application.dtos.auth_dto import MessageOutput
from manage_backend.application.dtos.user_dto import (
    AdminUserCreate,
    AvailabilityOutput,
    AvailabilityRequest,
    AvailabilityResult,
    UserListOutput,
    UserOutput,
    UserSelfUpdate,
    UserUpdate,
)
from manage_backend.application.use_cases.user_use_cases import AsyncUserService
from manage_backend.domain.models.token_domain_model import Identity
from manage_backend.domain.services.permission_service import (
    USERS_DELETE,
    USERS_READ,
    USERS_WRITE,
)
from manage_backend.shared.utils.pagination import pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


########################################################################
# Availability (public)
########################################################################

@router.get(
    "/check-username/{username}",
    response_model=AvailabilityResult,
    summary="Check Username - Is a username free",
)
async def check_username(
        username: str = Path(..., min_length=1, max_length=50),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.check_username(username)


@router.get(
    "/check-email/{email}",
    response_model=AvailabilityResult,
    summary="Check Email - Is an email free",
)
async def check_email(
        email: str = Path(..., min_length=3, max_length=100),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.check_email(email)


@router.post(
    "/check-availability",
    response_model=AvailabilityOutput,
    summary="Check Availability - Username and/or email",
    description="Checks the given fields; `exclude_user_id` ignores the user being edited.",
)
async def check_availability(
        request: AvailabilityRequest,
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.check_availability(request)


########################################################################
# Profile
########################################################################

@router.get(
    "/profile",
    response_model=UserOutput,
    summary="Get My Data - Logged in user data",
    description="Returns the authenticated user's data.",
)
async def get_profile(
        identity: Identity = Depends(get_current_identity),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.get_profile(identity.user_id)


@router.put(
    "/profile",
    response_model=UserOutput,
    summary="Update My Data - Update own email and password",
    description="Changing the password requires `current_password`.",
)
async def update_profile(
        update_data: UserSelfUpdate,
        identity: Identity = Depends(get_current_identity),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.update_profile(identity.user_id, update_data)


########################################################################
# Administration
########################################################################

@router.get(
    "",
    response_model=Page[UserListOutput],
    summary="List Users - Paginated, newest first",
    description="Requires the `users:read` permission.",
)
async def list_users(
        params: Params = Depends(pagination_params),
        _: Identity = Depends(require_permission(USERS_READ)),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.list_users(params)


@router.post(
    "",
    response_model=UserOutput,
    status_code=status.HTTP_201_CREATED,
    summary="Create User - Create a user with a role",
    description="Requires the `users:write` permission.",
)
async def create_user(
        data: AdminUserCreate,
        _: Identity = Depends(require_permission(USERS_WRITE)),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.create_user(data)


@router.get(
    "/{user_id}",
    response_model=UserOutput,
    summary="Get User - A user by ID",
    description="Requires the `users:read` permission.",
)
async def get_user(
        user_id: int = Path(..., ge=1, description="ID of the user"),
        _: Identity = Depends(require_permission(USERS_READ)),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.get_user(user_id)


@router.put(
    "/{user_id}",
    response_model=UserOutput,
    summary="Update User - Update username, email, role or status",
    description="Requires the `users:write` permission.",
)
async def update_user(
        data: UserUpdate,
        user_id: int = Path(..., ge=1, description="ID of the user to update"),
        _: Identity = Depends(require_permission(USERS_WRITE)),
        service: AsyncUserService = Depends(get_user_service),
):
    return await service.update_user(user_id, data)


@router.delete(
    "/{user_id}",
    response_model=MessageOutput,
    summary="Delete User - Permanently delete a user",
    description="Requires the `users:delete` permission. Users cannot delete themselves.",
)
async def delete_user(
        user_id: int = Path(..., ge=1, description="ID of the user to delete"),
        identity: Identity = Depends(require_permission(USERS_DELETE)),
        service: AsyncUserService = Depends(get_user_service),
):
    await service.delete_user(user_id, current_user_id=identity.user_id)
    return MessageOutput(message=f"User {user_id} deleted.")
