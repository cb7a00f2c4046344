# manage_backend/adapters/inbound/api/deps.py

"""
Dependencies for injection into API endpoints.

This module defines functions that provide dependencies via FastAPI
Depends() for authentication, authorization and database access.
"""

import logging
from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from manage_backend.adapters.configuration.container import ServiceContainer
from manage_backend.adapters.outbound.persistence.repositories.user_repository import AsyncUserRepository
from manage_backend.application.ports.outbound import IUserRepository
from manage_backend.application.use_cases.auth_use_cases import AsyncAuthService
from manage_backend.application.use_cases.user_use_cases import AsyncUserService
from manage_backend.domain.exceptions import (
    PermissionDeniedException,
    PermissionsNotCachedException,
    StoreUnavailableException,
)
from manage_backend.domain.models.token_domain_model import Identity
from manage_backend.domain.services.permission_service import PermissionService
from manage_backend.shared.utils.best_effort import best_effort

logger = logging.getLogger(__name__)

# Documents the bearer scheme in OpenAPI; the auth gate reads the raw header
bearer_scheme = HTTPBearer(auto_error=False)


########################################################################
# Container and database session
########################################################################

def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_db(container: ServiceContainer = Depends(get_container)) -> AsyncGenerator[AsyncSession, None]:
    async with container.database.session() as session:
        yield session


def get_user_repository(db: AsyncSession = Depends(get_db)) -> IUserRepository:
    return AsyncUserRepository(db)


def get_auth_service(
        users: IUserRepository = Depends(get_user_repository),
        container: ServiceContainer = Depends(get_container),
) -> AsyncAuthService:
    return AsyncAuthService(
        users=users,
        codec=container.codec,
        sessions=container.session_manager,
        passwords=container.password_hasher,
    )


def get_user_service(
        users: IUserRepository = Depends(get_user_repository),
        container: ServiceContainer = Depends(get_container),
) -> AsyncUserService:
    return AsyncUserService(users=users, passwords=container.password_hasher)


########################################################################
# User Token Authentication
########################################################################

async def get_current_identity(
        request: Request,
        container: ServiceContainer = Depends(get_container),
        _: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Identity:
    """
    Run the auth gate on the request's Authorization header.

    The identity is also stored on ``request.state.identity``.

    Raises:
        AuthenticationException: If the request cannot be authenticated
    """
    identity = await container.auth_gate.authenticate(request.headers.get("Authorization"))
    request.state.identity = identity
    return identity


def require_permission(permission: str) -> Callable:
    """
    Build a dependency that requires ``permission``.

    The cached permission set is used when it belongs to the identity's
    current role; otherwise permissions are recomputed from the role.
    """

    async def checker(
            identity: Identity = Depends(get_current_identity),
            container: ServiceContainer = Depends(get_container),
    ) -> Identity:
        cached = await best_effort(
            container.session_manager.get_cached_permissions(identity.user_id),
            action=f"read cached permissions for user {identity.user_id}",
            tolerate=(PermissionsNotCachedException, StoreUnavailableException),
        )
        if cached is not None and cached[0] == identity.role:
            permissions = cached[1]
        else:
            permissions = PermissionService.permissions_for_role(identity.role)

        if not PermissionService.has_permission(permissions, permission):
            logger.warning(f"User {identity.username} lacks permission {permission}")
            raise PermissionDeniedException(permission=permission)
        return identity

    return checker
