# manage_backend/adapters/outbound/cache/redis_session_store.py

"""
Session store backed by a Redis server.

Every command is bounded by the configured timeout. Connection errors and
timeouts surface as StoreUnavailableException; task cancellation is not
intercepted and propagates to the caller.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Awaitable, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from manage_backend.application.ports.outbound import ISessionStore
from manage_backend.domain.exceptions import StoreUnavailableException

logger = logging.getLogger(__name__)


def ttl_seconds(ttl: timedelta) -> int:
    """Redis rejects zero or negative expiries, so clamp to one second."""
    return max(1, int(ttl.total_seconds()))


class RedisSessionStore(ISessionStore):
    """Thin redis.asyncio wrapper implementing the session store port."""

    def __init__(self, redis_url: str, *, timeout: float = 2.0, client: Optional[Any] = None):
        self.redis_url = redis_url
        self.timeout = timeout
        self.client = client or aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )

    async def _run(self, command: str, key: str, awaitable: Awaitable) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Redis {command} timed out after {self.timeout}s for key '{key}'")
            raise StoreUnavailableException(detail=f"Redis {command} timed out")
        except RedisError as e:
            logger.warning(f"Redis {command} failed for key '{key}': {e}")
            raise StoreUnavailableException(detail=f"Redis {command} failed: {e}")

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        await self._run("SET", key, self.client.set(key, value, ex=ttl_seconds(ttl)))

    async def replace(self, key: str, value: str, ttl: timedelta) -> bool:
        # SET ... XX replies nil when the key does not exist
        return bool(await self._run("SET XX", key, self.client.set(key, value, ex=ttl_seconds(ttl), xx=True)))

    async def get(self, key: str) -> Optional[str]:
        return await self._run("GET", key, self.client.get(key))

    async def delete(self, key: str) -> None:
        await self._run("DEL", key, self.client.delete(key))

    async def exists(self, key: str) -> bool:
        return bool(await self._run("EXISTS", key, self.client.exists(key)))

    async def ping(self) -> bool:
        return bool(await self._run("PING", "-", self.client.ping()))

    async def close(self) -> None:
        await self.client.aclose()
