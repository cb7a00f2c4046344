# manage_backend/services/session_manager.py

"""
Session lifecycle on top of the session store.

Per user id the state is either NoSession or Active. Login and refresh
overwrite the record (last writer wins), logout and TTL expiry remove it.
Primary validity checks fail closed on store errors; the blacklist lookup
and the active marker fail open through ``best_effort``.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Tuple

from pydantic import ValidationError

from manage_backend.adapters.configuration.config import Settings
from manage_backend.application.dtos.session_dto import CachedPermissions, SessionRecord
from manage_backend.application.ports.outbound import ISessionManager, ISessionStore, ITokenCodec
from manage_backend.domain.exceptions import (
    InvalidRefreshTokenException,
    InvalidTokenException,
    PermissionsNotCachedException,
    RefreshMismatchException,
    SessionNotFoundException,
    TokenRevokedException,
)
from manage_backend.shared.utils.best_effort import best_effort

logger = logging.getLogger(__name__)

SESSION_PREFIX = "session:"
BLACKLIST_PREFIX = "blacklist:"
ACTIVE_PREFIX = "active:"
PERMISSIONS_PREFIX = "permissions:"

BLACKLIST_SENTINEL = "1"


def session_key(user_id: int) -> str:
    return f"{SESSION_PREFIX}{user_id}"


def blacklist_key(token_id: str) -> str:
    return f"{BLACKLIST_PREFIX}{token_id}"


def active_key(user_id: int) -> str:
    return f"{ACTIVE_PREFIX}{user_id}"


def permissions_key(user_id: int) -> str:
    return f"{PERMISSIONS_PREFIX}{user_id}"


class SessionManager(ISessionManager):
    """
    Coordinates session records, blacklist entries, active markers and the
    permission cache for every user.

    Args:
        store: key-value store with per-key expiry
        codec: token codec used to verify presented refresh tokens
        settings: supplies the session, marker and cache lifetimes
        clock: returns the current aware UTC datetime
    """

    def __init__(
            self,
            store: ISessionStore,
            codec: ITokenCodec,
            settings: Settings,
            clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.codec = codec
        self.session_ttl = settings.refresh_token_lifetime
        self.active_ttl = settings.active_marker_ttl
        self.permissions_ttl = settings.permission_cache_ttl
        self.clock = clock

    ####################################################################
    # Session records
    ####################################################################

    async def create_session(
            self,
            user_id: int,
            username: str,
            refresh_token: str,
            device_info: str = "",
            ip_address: str = "",
            user_agent: str = "",
    ) -> SessionRecord:
        """
        Write a fresh session record, replacing any previous one for the user.

        Raises:
            StoreUnavailableException: If the record could not be written
        """
        now = self.clock()
        record = SessionRecord(
            user_id=user_id,
            username=username,
            refresh_token=refresh_token,
            device_info=device_info or "",
            ip_address=ip_address or "",
            user_agent=user_agent or "",
            login_time=now,
            last_activity=now,
        )
        await self.store.set(session_key(user_id), record.model_dump_json(), self.session_ttl)
        logger.info(f"Session created for user {user_id}")
        return record

    async def get_session(self, user_id: int) -> SessionRecord:
        """
        Raises:
            SessionNotFoundException: If no record exists or it cannot be decoded
            StoreUnavailableException: If the store cannot be reached
        """
        raw = await self.store.get(session_key(user_id))
        if raw is None:
            raise SessionNotFoundException()
        try:
            return SessionRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding undecodable session record for user {user_id}: {e}")
            raise SessionNotFoundException(detail="Session record could not be decoded")

    async def update_last_activity(self, user_id: int) -> None:
        """
        Touch last-activity and re-set the full session TTL.

        The write only lands on an existing record, so a logout that
        deletes the session between the read and the write wins.

        Raises:
            SessionNotFoundException: If there is no session, before or at the write
        """
        record = await self.get_session(user_id)
        record.last_activity = self.clock()
        if not await self.store.replace(session_key(user_id), record.model_dump_json(), self.session_ttl):
            logger.info(f"Session of user {user_id} ended before its activity update")
            raise SessionNotFoundException()

    async def validate_refresh(self, refresh_token: str) -> SessionRecord:
        """
        Check a presented refresh token against the stored session.

        The stored token is compared byte for byte, so a token superseded by
        a later login or refresh is rejected.

        Raises:
            InvalidRefreshTokenException: If the token fails verification
            TokenRevokedException: If the token id is blacklisted
            SessionNotFoundException: If the user has no session
            RefreshMismatchException: If the session holds a different token
            StoreUnavailableException: If the session lookup fails
        """
        try:
            claims = self.codec.verify_refresh(refresh_token)
        except InvalidTokenException as e:
            logger.warning(f"Refresh token rejected: {e.internal_code}")
            raise InvalidRefreshTokenException(detail=e.detail)

        if await self.is_blacklisted(claims.token_id):
            logger.warning(f"Refresh token {claims.token_id} for user {claims.user_id} is revoked")
            raise TokenRevokedException()

        record = await self.get_session(claims.user_id)
        if not secrets.compare_digest(record.refresh_token.encode(), refresh_token.encode()):
            logger.warning(f"Refresh token for user {claims.user_id} does not match the current session")
            raise RefreshMismatchException()
        return record

    async def delete_session(self, user_id: int) -> None:
        await self.store.delete(session_key(user_id))
        logger.info(f"Session deleted for user {user_id}")

    ####################################################################
    # Blacklist
    ####################################################################

    async def blacklist(self, token_id: str, ttl: timedelta) -> None:
        """
        Revoke a token id for ``ttl``. A non-positive ttl writes nothing,
        since the token has already expired.
        """
        if ttl <= timedelta(0):
            return
        await self.store.set(blacklist_key(token_id), BLACKLIST_SENTINEL, ttl)

    async def is_blacklisted(self, token_id: str) -> bool:
        """Store errors count as not blacklisted (fail-open)."""
        return await best_effort(
            self.store.exists(blacklist_key(token_id)),
            action=f"blacklist lookup for {token_id}",
            default=False,
        )

    ####################################################################
    # Active marker
    ####################################################################

    async def set_active(self, user_id: int) -> None:
        await best_effort(
            self.store.set(active_key(user_id), self.clock().isoformat(), self.active_ttl),
            action=f"set active marker for user {user_id}",
        )

    async def is_active(self, user_id: int) -> bool:
        return await best_effort(
            self.store.exists(active_key(user_id)),
            action=f"active marker lookup for user {user_id}",
            default=False,
        )

    ####################################################################
    # Permission cache
    ####################################################################

    async def cache_permissions(self, user_id: int, role: str, permissions: List[str]) -> None:
        entry = CachedPermissions(role=role, permissions=list(permissions), cached_at=self.clock())
        await self.store.set(permissions_key(user_id), entry.model_dump_json(), self.permissions_ttl)

    async def get_cached_permissions(self, user_id: int) -> Tuple[str, List[str]]:
        """
        Raises:
            PermissionsNotCachedException: On a cache miss or an undecodable entry
        """
        raw = await self.store.get(permissions_key(user_id))
        if raw is None:
            raise PermissionsNotCachedException()
        try:
            entry = CachedPermissions.model_validate_json(raw)
        except ValidationError:
            raise PermissionsNotCachedException(detail="Cached permissions could not be decoded")
        return entry.role, entry.permissions
