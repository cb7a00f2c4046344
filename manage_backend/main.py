# manage_backend/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from manage_backend.adapters.configuration.config import Settings
from manage_backend.adapters.configuration.container import ServiceContainer, build_container
from manage_backend.application.ports.outbound import ISessionStore
from manage_backend.domain.exceptions import DomainException
from manage_backend.shared.middleware import (
    AsyncExceptionMiddleware,
    AsyncRequestLoggingMiddleware,
    domain_exception_handler,
)
from manage_backend.shared.utils.best_effort import best_effort

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables if configured and check the session store.
    Shutdown: close the store and dispose of the database engine.
    """
    container: ServiceContainer = app.state.container
    logger.info("Application starting up...")

    if container.settings.DB_CREATE_TABLES:
        await container.database.create_all()

    reachable = await best_effort(
        container.session_store.ping(),
        action="session store ping at startup",
        default=False,
    )
    if not reachable:
        logger.warning("Session store is not reachable; session operations will fail until it is")

    yield

    logger.info("Application shutting down...")
    await best_effort(container.session_store.close(), action="close session store")
    await container.database.dispose()


def create_app(settings: Optional[Settings] = None, *, session_store: Optional[ISessionStore] = None) -> FastAPI:
    """
    Build the application.

    Run with ``uvicorn manage_backend.main:create_app --factory``.

    Args:
        settings: configuration; read from the environment when omitted
        session_store: replaces the store selected by ``CACHE_BACKEND``
    """
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Manage Backend",
        description="User management with session-backed JWT authentication",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.container = build_container(settings, session_store=session_store)

    app.add_exception_handler(DomainException, domain_exception_handler)

    app.add_middleware(AsyncRequestLoggingMiddleware, environment=settings.ENVIRONMENT)
    app.add_middleware(AsyncExceptionMiddleware, environment=settings.ENVIRONMENT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from manage_backend.adapters.inbound.api.v1.router import api_router as api_v1_router

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def redirect_to_docs():
        return RedirectResponse(url="/docs")

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    logger.info(f"Application created (environment={settings.ENVIRONMENT}, cache={settings.CACHE_BACKEND})")
    return app
