# manage_backend/domain/services/permission_service.py

from typing import Dict, List

from manage_backend.domain.models.user_domain_model import ROLE_ADMIN, ROLE_USER

PROFILE_READ = "profile:read"
PROFILE_WRITE = "profile:write"
USERS_READ = "users:read"
USERS_WRITE = "users:write"
USERS_DELETE = "users:delete"

ROLE_PERMISSIONS: Dict[str, List[str]] = {
    ROLE_USER: [PROFILE_READ, PROFILE_WRITE, USERS_READ],
    ROLE_ADMIN: [PROFILE_READ, PROFILE_WRITE, USERS_READ, USERS_WRITE, USERS_DELETE],
}


class PermissionService:
    """
    Domain service mapping roles to permission codenames.
    """

    @staticmethod
    def permissions_for_role(role: str) -> List[str]:
        """Return the permissions granted to a role (unknown roles get none)."""
        return list(ROLE_PERMISSIONS.get(role, []))

    @staticmethod
    def has_permission(permissions: List[str], permission_codename: str) -> bool:
        return permission_codename in permissions
