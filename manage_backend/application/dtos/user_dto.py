# manage_backend/application/dtos/user_dto.py

"""
DTOs for user data.

This module defines the Pydantic DTOs for validation and serialization of
user data: registration, administration, profile handling and
availability checks. Password hashes never appear in an output DTO.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, EmailStr, Field

from manage_backend.application.dtos.base_dto import CustomBaseModel
from manage_backend.domain.models.user_domain_model import ROLES, ROLE_USER, STATUSES

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


def _check_role(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in ROLES:
        raise ValueError(f"role must be one of {', '.join(ROLES)}")
    return v


def _check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in STATUSES:
        raise ValueError(f"status must be one of {', '.join(STATUSES)}")
    return v


Role = Annotated[str, AfterValidator(_check_role)]
Status = Annotated[str, AfterValidator(_check_status)]


class UserBase(CustomBaseModel):
    """
    Base DTO for user data.

    Contains the attributes common to the user input DTOs.
    """
    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=USERNAME_PATTERN,
        description="Unique username (letters, digits, '_', '.', '-').",
    )
    email: EmailStr = Field(..., description="User email. Must be valid and unique.")


class UserCreate(UserBase):
    """
    DTO for public registration.

    Self-registered accounts always receive the ``user`` role.
    """
    password: str = Field(
        ..., min_length=5, max_length=72, description="User password (5 to 72 characters)."
    )


class AdminUserCreate(UserCreate):
    """DTO for an administrator creating a user with an explicit role."""
    role: Role = Field(ROLE_USER, description="Role of the new user.")


class UserSelfUpdate(CustomBaseModel):
    """
    DTO for users updating their own profile.

    Changing the password requires ``current_password``.
    """
    email: Optional[EmailStr] = Field(None, description="New email.")
    password: Optional[str] = Field(
        None, min_length=5, max_length=72, description="New password."
    )
    current_password: Optional[str] = Field(
        None, description="Current password (required to change the password)."
    )


class UserUpdate(CustomBaseModel):
    """
    DTO for administrators updating any user.
    """
    username: Optional[str] = Field(
        None, min_length=3, max_length=50, pattern=USERNAME_PATTERN, description="New username."
    )
    email: Optional[EmailStr] = Field(None, description="New email.")
    role: Optional[Role] = Field(None, description="New role.")
    status: Optional[Status] = Field(None, description="New status (active or inactive).")


class UserOutput(CustomBaseModel):
    """
    DTO for returning user data without sensitive fields.
    """
    id: int = Field(..., description="Unique identifier of the user.")
    username: str
    email: str
    role: str
    status: str
    created_at: Optional[datetime] = Field(None, description="Creation date and time.")
    updated_at: Optional[datetime] = Field(None, description="Last update date and time.")


class UserListOutput(CustomBaseModel):
    """
    DTO for user listings.
    """
    id: int
    username: str
    email: str
    role: str
    status: str
    created_at: Optional[datetime] = None


class PublicUserOutput(CustomBaseModel):
    """Publicly visible user fields."""
    id: int
    username: str
    role: str
    created_at: Optional[datetime] = None


########################################################################
# Availability checks
########################################################################

class AvailabilityRequest(CustomBaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    exclude_user_id: Optional[int] = Field(
        None, description="Ignore this user (e.g. the one being edited)."
    )


class AvailabilityResult(CustomBaseModel):
    available: bool
    message: str


class AvailabilityOutput(CustomBaseModel):
    """Only the fields present in the request are reported."""
    username: Optional[AvailabilityResult] = None
    email: Optional[AvailabilityResult] = None
