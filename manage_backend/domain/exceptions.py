# manage_backend/domain/exceptions.py

"""
Application exceptions.

Every exception carries an ``internal_code`` used in logs and responses
and a class-level HTTP ``status_code`` used by the API exception handler.
Authentication failures share one public message so that callers cannot
tell a revoked token from an expired or malformed one.
"""

from typing import Any, Dict, Optional

from fastapi import status


class DomainException(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Application error"
    default_code: str = "APPLICATION_ERROR"

    def __init__(
            self,
            detail: Optional[str] = None,
            internal_code: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None,
    ):
        self.detail = detail or self.default_detail
        self.internal_code = internal_code or self.default_code
        self.details = details or {}
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        """Message safe to return to an API caller."""
        return self.detail


########################################################################
# Authentication / session errors
########################################################################

class AuthenticationException(DomainException):
    """Request could not be authenticated. Rendered as a uniform 401."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication failed"
    default_code = "UNAUTHORIZED"

    @property
    def public_detail(self) -> str:
        return "Could not validate credentials"


class MissingAuthException(AuthenticationException):
    default_detail = "Authorization header missing or not a bearer token"
    default_code = "MISSING_AUTH"


class InvalidTokenException(AuthenticationException):
    default_detail = "Invalid token"
    default_code = "INVALID_TOKEN"


class TokenExpiredException(InvalidTokenException):
    default_detail = "Token expired"
    default_code = "TOKEN_EXPIRED"


class WrongTokenTypeException(InvalidTokenException):
    default_detail = "Unexpected token type"
    default_code = "WRONG_TOKEN_TYPE"


class InvalidRefreshTokenException(InvalidTokenException):
    default_detail = "Invalid refresh token"
    default_code = "INVALID_REFRESH_TOKEN"


class TokenRevokedException(AuthenticationException):
    default_detail = "Token has been revoked"
    default_code = "TOKEN_REVOKED"


class SessionNotFoundException(AuthenticationException):
    default_detail = "Session not found"
    default_code = "SESSION_NOT_FOUND"


class RefreshMismatchException(AuthenticationException):
    default_detail = "Refresh token does not match the current session"
    default_code = "REFRESH_MISMATCH"


class InvalidCredentialsException(DomainException):
    """Login failure. The message is identical for every cause."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid username or password"
    default_code = "INVALID_CREDENTIALS"


########################################################################
# Infrastructure errors
########################################################################

class StoreUnavailableException(DomainException):
    """The key-value store could not be reached or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Session store unavailable"
    default_code = "STORE_UNAVAILABLE"

    @property
    def public_detail(self) -> str:
        return "Service temporarily unavailable"


class SigningException(DomainException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Could not sign token"
    default_code = "SIGNING_ERROR"

    @property
    def public_detail(self) -> str:
        return "Internal server error"


class PermissionsNotCachedException(DomainException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Permissions not cached"
    default_code = "PERMISSIONS_NOT_CACHED"


class DatabaseOperationException(DomainException):
    """Error while executing a database operation."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Error executing database operation"
    default_code = "DATABASE_OPERATION_ERROR"

    def __init__(self, detail: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(detail=detail)
        self.original_error = original_error

    @property
    def public_detail(self) -> str:
        return "Internal server error"


########################################################################
# Resource errors
########################################################################

class ResourceNotFoundException(DomainException):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"
    default_code = "RESOURCE_NOT_FOUND"

    def __init__(self, detail: Optional[str] = None, resource_id: Any = None):
        resource_info = f" (ID: {resource_id})" if resource_id is not None else ""
        super().__init__(detail=f"{detail or self.default_detail}{resource_info}")


class ResourceAlreadyExistsException(DomainException):
    """Resource already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"
    default_code = "RESOURCE_ALREADY_EXISTS"


class PermissionDeniedException(DomainException):
    """Permission denied."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Permission denied"
    default_code = "PERMISSION_DENIED"

    def __init__(self, detail: Optional[str] = None, permission: Optional[str] = None):
        permission_info = f" (required permission: {permission})" if permission else ""
        super().__init__(detail=f"{detail or self.default_detail}{permission_info}")


class InvalidInputException(DomainException):
    """Invalid input data."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input data"
    default_code = "INVALID_INPUT"

    def __init__(self, detail: Optional[str] = None, fields: Optional[Dict[str, str]] = None):
        field_errors = ""
        if fields:
            field_errors = ": " + ", ".join([f"{field}: {error}" for field, error in fields.items()])
        super().__init__(detail=f"{detail or self.default_detail}{field_errors}", details=fields)
