# manage_backend/services/auth_gate.py

import logging
from typing import Optional

from manage_backend.application.ports.outbound import ISessionManager, ITokenCodec
from manage_backend.domain.exceptions import (
    MissingAuthException,
    SessionNotFoundException,
    StoreUnavailableException,
    TokenRevokedException,
    WrongTokenTypeException,
)
from manage_backend.domain.models.token_domain_model import Identity
from manage_backend.shared.utils.best_effort import best_effort

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthGate:
    """
    Request-time bearer token check.

    Without a session manager only the token itself is verified; with one,
    revoked tokens are rejected and session activity is tracked.
    """

    def __init__(self, codec: ITokenCodec, session_manager: Optional[ISessionManager] = None):
        self.codec = codec
        self.session_manager = session_manager

    @staticmethod
    def extract_bearer(authorization_header: Optional[str]) -> str:
        if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
            raise MissingAuthException()
        token = authorization_header[len(BEARER_PREFIX):].strip()
        if not token:
            raise MissingAuthException()
        return token

    async def authenticate(self, authorization_header: Optional[str]) -> Identity:
        """
        Validate the header value and return the caller identity.

        Raises:
            MissingAuthException: If the header is absent or not a bearer token
            InvalidTokenException: If the token fails verification or is a refresh token
            TokenRevokedException: If the token id is blacklisted
        """
        token = self.extract_bearer(authorization_header)
        claims = self.codec.verify(token)
        if claims.is_refresh:
            raise WrongTokenTypeException(detail="Refresh token presented as bearer credential")

        if self.session_manager is not None:
            if await self.session_manager.is_blacklisted(claims.token_id):
                logger.warning(f"Revoked token {claims.token_id} presented by user {claims.user_id}")
                raise TokenRevokedException()

            await best_effort(
                self.session_manager.update_last_activity(claims.user_id),
                action=f"update last activity for user {claims.user_id}",
                tolerate=(SessionNotFoundException, StoreUnavailableException),
            )
            await self.session_manager.set_active(claims.user_id)

        return Identity(
            user_id=claims.user_id,
            username=claims.username,
            role=claims.role,
            token_id=claims.token_id,
            access_token=token,
        )
