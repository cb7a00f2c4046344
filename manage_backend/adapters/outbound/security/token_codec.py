# manage_backend/adapters/outbound/security/token_codec.py

"""
Signed token issuance and verification.

Access and refresh tokens share one signing key and are told apart by the
``type`` claim, so every consumer must check the discriminator.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt, JWTError, JOSEError
from jose.exceptions import ExpiredSignatureError

from manage_backend.adapters.configuration.config import Settings
from manage_backend.application.ports.outbound import ITokenCodec
from manage_backend.domain.exceptions import (
    InvalidTokenException,
    SigningException,
    TokenExpiredException,
    WrongTokenTypeException,
)
from manage_backend.domain.models.token_domain_model import (
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_REFRESH,
    TokenClaims,
    TokenPair,
)

logger = logging.getLogger(__name__)

TOKEN_TYPES = (TOKEN_TYPE_ACCESS, TOKEN_TYPE_REFRESH)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JWTTokenCodec(ITokenCodec):
    """
    JWT codec for user tokens.

    Args:
        settings: signing key, algorithm, issuer and lifetimes
        clock: returns the current aware UTC datetime
    """

    def __init__(self, settings: Settings, clock: Callable[[], datetime] = utc_now):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.issuer = settings.JWT_ISSUER
        self.access_lifetime = settings.access_token_lifetime
        self.refresh_lifetime = settings.refresh_token_lifetime
        self.clock = clock

    def _encode(self, user_id: int, username: str, role: str, token_type: str, lifetime: timedelta) -> str:
        if not self.secret_key:
            raise SigningException(detail="Signing key is empty")

        issued_at = self.clock()
        expire = issued_at + lifetime
        try:
            payload = {
                "sub": str(user_id),
                "username": username,
                "role": role,
                "jti": secrets.token_hex(16),
                "type": token_type,
                "iss": self.issuer,
                "iat": int(issued_at.timestamp()),
                "nbf": int(issued_at.timestamp()),
                "exp": int(expire.timestamp()),
            }
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except (JOSEError, OSError) as e:
            logger.error(f"Error signing {token_type} token for user {user_id}: {e}")
            raise SigningException(detail=f"Could not sign {token_type} token")

    def issue_pair(self, user_id: int, username: str, role: str) -> TokenPair:
        """
        Create an access token and a refresh token, each with its own token id.

        Raises:
            SigningException: If the key is unusable or randomness fails
        """
        access_token = self._encode(user_id, username, role, TOKEN_TYPE_ACCESS, self.access_lifetime)
        refresh_token = self._encode(user_id, username, role, TOKEN_TYPE_REFRESH, self.refresh_lifetime)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_lifetime.total_seconds()),
            refresh_expires_in=int(self.refresh_lifetime.total_seconds()),
        )

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature, algorithm, issuer and expiry.

        Raises:
            TokenExpiredException: If the token is past its expiry
            InvalidTokenException: On any other verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTError as e:
            raise InvalidTokenException(detail=f"Invalid token: {e}")

        try:
            claims = TokenClaims(
                user_id=int(payload["sub"]),
                username=str(payload["username"]),
                role=str(payload["role"]),
                token_id=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
                token_type=str(payload["type"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenException(detail=f"Malformed claims: {e}")

        if claims.token_type not in TOKEN_TYPES or not claims.token_id:
            raise InvalidTokenException(detail="Malformed claims")
        if claims.expires_at <= claims.issued_at:
            raise InvalidTokenException(detail="Expiry precedes issuance")
        # jose checks exp against wall time; the codec clock is authoritative
        if claims.expires_at <= self.clock():
            raise TokenExpiredException()
        return claims

    def verify_refresh(self, token: str) -> TokenClaims:
        claims = self.verify(token)
        if not claims.is_refresh:
            raise WrongTokenTypeException()
        return claims

    def time_remaining(self, claims: TokenClaims, now: Optional[datetime] = None) -> timedelta:
        remaining = claims.expires_at - (now or self.clock())
        return max(timedelta(0), remaining)
