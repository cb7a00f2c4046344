# manage_backend/domain/models/token_domain_model.py

from dataclasses import dataclass
from datetime import datetime

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by a signed token."""
    user_id: int
    username: str
    role: str
    token_id: str
    issued_at: datetime
    expires_at: datetime
    token_type: str

    @property
    def is_refresh(self) -> bool:
        return self.token_type == TOKEN_TYPE_REFRESH


@dataclass(frozen=True)
class TokenPair:
    """Result of issuance. Lifetimes are expressed in seconds."""
    access_token: str
    refresh_token: str
    expires_in: int
    refresh_expires_in: int


@dataclass(frozen=True)
class Identity:
    """Request-scoped identity attached by the auth gate."""
    user_id: int
    username: str
    role: str
    token_id: str
    access_token: str
