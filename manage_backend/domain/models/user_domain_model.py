# manage_backend/domain/models/user_domain_model.py

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)


@dataclass
class User:
    """Domain model for a user entity."""
    id: int
    username: str
    email: str
    password: str  # This would be hashed already
    role: str = ROLE_USER
    status: str = STATUS_ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
