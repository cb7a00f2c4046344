# manage_backend/adapters/configuration/container.py

"""
Process-wide collaborators, built once from Settings.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from manage_backend.adapters.configuration.config import Settings
from manage_backend.adapters.outbound.cache.memory_session_store import InMemorySessionStore
from manage_backend.adapters.outbound.cache.redis_session_store import RedisSessionStore
from manage_backend.adapters.outbound.persistence.database import Database
from manage_backend.adapters.outbound.security.password_hasher import PasslibPasswordHasher
from manage_backend.adapters.outbound.security.token_codec import JWTTokenCodec
from manage_backend.application.ports.outbound import ISessionStore
from manage_backend.services.auth_gate import AuthGate
from manage_backend.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    codec: JWTTokenCodec
    session_store: ISessionStore
    session_manager: SessionManager
    auth_gate: AuthGate
    password_hasher: PasslibPasswordHasher
    database: Database


def build_session_store(settings: Settings) -> ISessionStore:
    if settings.CACHE_BACKEND == "memory":
        logger.info("Using in-memory session store")
        return InMemorySessionStore()
    logger.info(f"Using Redis session store at {settings.REDIS_URL.split('@')[-1]}")
    return RedisSessionStore(settings.REDIS_URL, timeout=settings.REDIS_TIMEOUT_SECONDS)


def build_container(settings: Settings, session_store: Optional[ISessionStore] = None) -> ServiceContainer:
    """
    Wire codec, store, session manager, auth gate, hasher and database.

    Args:
        settings: process configuration
        session_store: replaces the store selected by ``CACHE_BACKEND``
    """
    codec = JWTTokenCodec(settings)
    store = session_store or build_session_store(settings)
    session_manager = SessionManager(store, codec, settings)
    return ServiceContainer(
        settings=settings,
        codec=codec,
        session_store=store,
        session_manager=session_manager,
        auth_gate=AuthGate(codec, session_manager),
        password_hasher=PasslibPasswordHasher(settings.PASSWORD_SCHEMES),
        database=Database(settings.async_database_url, echo=settings.DEBUG),
    )
