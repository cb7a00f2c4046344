# manage_backend/shared/middleware/__init__.py

from manage_backend.shared.middleware.exception_middleware import (
    AsyncExceptionMiddleware,
    domain_exception_handler,
)
from manage_backend.shared.middleware.logging_middleware import AsyncRequestLoggingMiddleware

__all__ = [
    "AsyncExceptionMiddleware",
    "AsyncRequestLoggingMiddleware",
    "domain_exception_handler",
]
