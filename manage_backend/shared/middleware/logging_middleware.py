# manage_backend/shared/middleware/logging_middleware.py

"""
Middleware for HTTP request logging.

One line per request and one per response. The response line names the
authenticated user when the auth gate attached an identity.
"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


def _caller(request: Request) -> str:
    identity = getattr(request.state, "identity", None)
    return f"user {identity.user_id}" if identity is not None else "anonymous"


class AsyncRequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging. Production logs omit client address,
    query string and timing.
    """

    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self.verbose = environment != "production"

    async def dispatch(self, request: Request, call_next):
        route = f"{request.method} {request.url.path}"
        if self.verbose:
            client = request.client.host if request.client else "N/A"
            logger.info(f"Request: {route} | Query: {dict(request.query_params) or 'N/A'} | Client: {client}")
        else:
            logger.info(f"Request: {route}")

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        summary = f"Response: {response.status_code} for {route} ({_caller(request)})"
        logger.info(f"{summary} | Time: {elapsed:.4f}s" if self.verbose else summary)
        return response
