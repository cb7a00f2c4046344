import asyncio
import inspect
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-do-not-use-in-production")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("DB_CREATE_TABLES", "false")

import pytest  # noqa: E402

from manage_backend.adapters.configuration.config import Settings  # noqa: E402
from manage_backend.adapters.outbound.cache.memory_session_store import InMemorySessionStore  # noqa: E402
from manage_backend.adapters.outbound.security.token_codec import JWTTokenCodec  # noqa: E402
from manage_backend.services.session_manager import SessionManager  # noqa: E402
from tests.fakes import FakeClock, InMemoryUserRepository, PlainPasswordHasher  # noqa: E402


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames
            if name in pyfuncitem.funcargs
        }
        asyncio.run(pyfuncitem.obj(**call_kwargs))
        return True
    return None


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as async")


@pytest.fixture
def settings():
    return Settings(
        SECRET_KEY="Test-Secret-Key_for-Automation-Only-987654321!",
        CACHE_BACKEND="memory",
        DB_CREATE_TABLES=False,
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
        REFRESH_TOKEN_EXPIRE_HOURS=720,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(clock=clock.monotonic)


@pytest.fixture
def codec(settings):
    return JWTTokenCodec(settings)


@pytest.fixture
def session_manager(store, codec, settings):
    return SessionManager(store, codec, settings)


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def passwords():
    return PlainPasswordHasher()
