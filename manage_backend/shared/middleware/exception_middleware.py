# manage_backend/shared/middleware/exception_middleware.py

"""
Centralized exception handling.

Domain exceptions are rendered by ``domain_exception_handler``, registered
on the application. Everything that escapes the handlers is caught by
``AsyncExceptionMiddleware`` and turned into a JSON error response.
"""

import logging
import re
import time
from typing import Callable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from manage_backend.domain.exceptions import AuthenticationException, DomainException

logger = logging.getLogger(__name__)


def _client(request: Request) -> str:
    return request.client.host if request.client else "N/A"


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """
    Render a domain exception as ``{"detail", "code"}``.

    Authentication failures share one detail and code so the response does
    not reveal whether a token was revoked, expired or malformed; the real
    code is only logged.
    """
    logger.warning(
        f"Domain exception: {exc.detail} | Code: {exc.internal_code} | "
        f"Path: {request.url.path} | Client: {_client(request)}"
    )
    headers = None
    code = exc.internal_code
    if isinstance(exc, AuthenticationException):
        code = AuthenticationException.default_code
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.public_detail, "code": code},
        headers=headers,
    )


class AsyncExceptionMiddleware(BaseHTTPMiddleware):
    """
    Middleware for exceptions no handler dealt with.
    Also stamps every response with ``X-Process-Time``.
    """

    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self.environment = environment

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.time()
        try:
            response = await call_next(request)
            response.headers["X-Process-Time"] = str(time.time() - start_time)
            return response

        except IntegrityError as exc:
            constraint_name = self._extract_constraint_name(str(exc))
            logger.error(
                f"Integrity error: Type={type(exc).__name__} | "
                f"Constraint={constraint_name or 'N/A'} | "
                f"Path: {request.url.path} | Client: {_client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={
                    "detail": "Database integrity error" if self.is_production else str(exc),
                    "code": "INTEGRITY_ERROR",
                }
            )

        except SQLAlchemyError as exc:
            logger.error(
                f"Database error: {type(exc).__name__}: {exc} | "
                f"Path: {request.url.path} | Client: {_client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "detail": "Internal database error" if self.is_production else str(exc),
                    "code": "DATABASE_ERROR",
                }
            )

        except Exception as exc:
            logger.exception(
                f"Unhandled exception: Type={type(exc).__name__} | "
                f"Path: {request.url.path} | Client: {_client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "detail": "Internal server error" if self.is_production else str(exc),
                    "code": "INTERNAL_SERVER_ERROR",
                }
            )

    @staticmethod
    def _extract_constraint_name(error_message: str) -> Optional[str]:
        """
        Attempts to extract the constraint name from an integrity error message.
        """
        patterns = [
            r'violates unique constraint "(.*?)"',
            r'constraint "(.*?)"',
            r'UNIQUE constraint failed: (.*)',
        ]
        for pattern in patterns:
            match = re.search(pattern, error_message)
            if match:
                return match.group(1)
        return None
