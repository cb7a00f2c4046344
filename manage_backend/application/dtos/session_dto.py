# manage_backend/application/dtos/session_dto.py

"""
Serialized shapes kept in the session store.
"""

from datetime import datetime
from typing import List

from pydantic import Field

from manage_backend.application.dtos.base_dto import CustomBaseModel


class SessionRecord(CustomBaseModel):
    """
    One logged-in session per user, stored as JSON under ``session:<user_id>``.

    Device, IP and user agent are opaque strings and are not validated.
    """
    user_id: int
    username: str
    refresh_token: str
    device_info: str = ""
    ip_address: str = ""
    user_agent: str = ""
    login_time: datetime
    last_activity: datetime


class CachedPermissions(CustomBaseModel):
    """Role and permission set cached under ``permissions:<user_id>``."""
    role: str
    permissions: List[str] = Field(default_factory=list)
    cached_at: datetime
