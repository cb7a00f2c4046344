# manage_backend/application/ports/outbound.py

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from manage_backend.application.dtos.session_dto import SessionRecord
from manage_backend.domain.models.token_domain_model import TokenClaims, TokenPair
from manage_backend.domain.models.user_domain_model import User


class IUserRepository(ABC):
    """User repository interface."""

    @abstractmethod
    async def get(self, id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    @abstractmethod
    async def create(self, user_data: Dict[str, Any]) -> User:
        """Create a user. ``user_data['password']`` is already hashed."""
        pass

    @abstractmethod
    async def update(self, id: int, changes: Dict[str, Any]) -> User:
        """Apply changes to an existing user."""
        pass

    @abstractmethod
    async def delete(self, id: int) -> None:
        """Delete a user by ID."""
        pass

    @abstractmethod
    async def list(self, offset: int = 0, limit: int = 100) -> Tuple[List[User], int]:
        """Return one page of users, newest first, and the total count."""
        pass

    @abstractmethod
    async def username_exists(self, username: str, exclude_id: Optional[int] = None) -> bool:
        pass

    @abstractmethod
    async def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        pass


class IPasswordHasher(ABC):
    """Password KDF interface."""

    @abstractmethod
    async def hash_password(self, password: str) -> str:
        pass

    @abstractmethod
    async def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        pass


class ITokenCodec(ABC):
    """Token issuance and verification interface."""

    @abstractmethod
    def issue_pair(self, user_id: int, username: str, role: str) -> TokenPair:
        """Create an access token and a refresh token."""
        pass

    @abstractmethod
    def verify(self, token: str) -> TokenClaims:
        """Verify signature, algorithm and expiry of any token."""
        pass

    @abstractmethod
    def verify_refresh(self, token: str) -> TokenClaims:
        """Verify a token and require it to be a refresh token."""
        pass

    @abstractmethod
    def time_remaining(self, claims: TokenClaims) -> timedelta:
        """Time until expiry, never negative."""
        pass


class ISessionStore(ABC):
    """
    Key-value store with per-key expiry.

    Every method may raise StoreUnavailableException.
    """

    @abstractmethod
    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        pass

    @abstractmethod
    async def replace(self, key: str, value: str, ttl: timedelta) -> bool:
        """
        Overwrite ``key`` only if it currently holds a live value.

        Returns:
            bool: False when the key was absent or expired and nothing was written
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value or None when the key is absent or expired."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    async def ping(self) -> bool:
        """Connectivity check used at startup."""
        return True

    async def close(self) -> None:
        """Release connections at shutdown."""
        return None


class ISessionManager(ABC):
    """Session lifecycle interface consumed by the auth use cases and the auth gate."""

    @abstractmethod
    async def create_session(
            self,
            user_id: int,
            username: str,
            refresh_token: str,
            device_info: str = "",
            ip_address: str = "",
            user_agent: str = "",
    ) -> SessionRecord:
        pass

    @abstractmethod
    async def get_session(self, user_id: int) -> SessionRecord:
        pass

    @abstractmethod
    async def update_last_activity(self, user_id: int) -> None:
        pass

    @abstractmethod
    async def validate_refresh(self, refresh_token: str) -> SessionRecord:
        pass

    @abstractmethod
    async def delete_session(self, user_id: int) -> None:
        pass

    @abstractmethod
    async def blacklist(self, token_id: str, ttl: timedelta) -> None:
        pass

    @abstractmethod
    async def is_blacklisted(self, token_id: str) -> bool:
        pass

    @abstractmethod
    async def set_active(self, user_id: int) -> None:
        pass

    @abstractmethod
    async def is_active(self, user_id: int) -> bool:
        pass

    @abstractmethod
    async def cache_permissions(self, user_id: int, role: str, permissions: List[str]) -> None:
        pass

    @abstractmethod
    async def get_cached_permissions(self, user_id: int) -> Tuple[str, List[str]]:
        pass
