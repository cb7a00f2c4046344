"""Tests for the session store adapters."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from manage_backend.adapters.configuration.config import Settings
from manage_backend.adapters.configuration.container import build_session_store
from manage_backend.adapters.outbound.cache.memory_session_store import InMemorySessionStore
from manage_backend.adapters.outbound.cache.redis_session_store import RedisSessionStore, ttl_seconds
from manage_backend.domain.exceptions import StoreUnavailableException


class TestInMemorySessionStore:
    """Per-key expiry of the process-local store."""

    @pytest.mark.asyncio
    async def test_value_lives_until_ttl(self, store, clock):
        await store.set("session:1", "payload", timedelta(seconds=30))

        clock.advance(29)
        assert await store.get("session:1") == "payload"
        assert await store.exists("session:1")

        clock.advance(1)
        assert await store.get("session:1") is None
        assert not await store.exists("session:1")

    @pytest.mark.asyncio
    async def test_set_overwrites_value_and_ttl(self, store, clock):
        await store.set("k", "old", timedelta(seconds=5))
        clock.advance(4)
        await store.set("k", "new", timedelta(seconds=5))
        clock.advance(4)

        assert await store.get("k") == "new"

    @pytest.mark.asyncio
    async def test_replace_needs_a_live_key(self, store, clock):
        assert await store.replace("session:1", "v1", timedelta(seconds=10)) is False
        assert await store.get("session:1") is None

        await store.set("session:1", "v1", timedelta(seconds=10))
        assert await store.replace("session:1", "v2", timedelta(seconds=10)) is True
        assert await store.get("session:1") == "v2"

        clock.advance(10)
        assert await store.replace("session:1", "v3", timedelta(seconds=10)) is False
        assert await store.get("session:1") is None

    @pytest.mark.asyncio
    async def test_expired_keys_are_swept_on_write(self, store, clock):
        """Keys that are never read again are still released once they expire."""
        for i in range(1000):
            await store.set(f"blacklist:{i}", "1", timedelta(minutes=30))
        assert len(store) == 1000

        clock.advance(3600)
        await store.set("blacklist:late", "1", timedelta(minutes=30))

        assert len(store) == 1
        assert await store.exists("blacklist:late")

    @pytest.mark.asyncio
    async def test_sweep_keeps_live_keys(self, store, clock):
        await store.set("short", "1", timedelta(seconds=30))
        await store.set("long", "1", timedelta(hours=2))

        clock.advance(120)
        await store.set("other", "1", timedelta(hours=2))

        assert len(store) == 2
        assert await store.get("long") == "1"

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store):
        await store.set("k", "v", timedelta(minutes=1))
        await store.delete("k")
        await store.delete("k")
        await store.delete("never-set")

        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_close_drops_everything(self, store):
        await store.set("k", "v", timedelta(minutes=1))
        assert await store.ping()

        await store.close()
        assert await store.get("k") is None


class TestRedisSessionStore:
    """The Redis adapter against a mocked client."""

    def _store(self, client=None, timeout=2.0):
        return RedisSessionStore("redis://unused:6379/0", timeout=timeout, client=client or AsyncMock())

    def test_ttl_is_clamped_to_one_second(self):
        assert ttl_seconds(timedelta(minutes=2)) == 120
        assert ttl_seconds(timedelta(milliseconds=300)) == 1
        assert ttl_seconds(timedelta(0)) == 1

    @pytest.mark.asyncio
    async def test_set_passes_expiry_in_seconds(self):
        store = self._store()
        await store.set("blacklist:abc", "1", timedelta(minutes=30))
        store.client.set.assert_awaited_once_with("blacklist:abc", "1", ex=1800)

    @pytest.mark.asyncio
    async def test_replace_only_overwrites_existing_keys(self):
        store = self._store()
        store.client.set.return_value = None

        assert await store.replace("session:1", "{}", timedelta(hours=1)) is False
        store.client.set.assert_awaited_once_with("session:1", "{}", ex=3600, xx=True)

        store.client.set.return_value = True
        assert await store.replace("session:1", "{}", timedelta(hours=1)) is True

    @pytest.mark.asyncio
    async def test_exists_returns_bool(self):
        store = self._store()
        store.client.exists.return_value = 1
        assert await store.exists("k") is True

        store.client.exists.return_value = 0
        assert await store.exists("k") is False

    @pytest.mark.asyncio
    async def test_get_returns_decoded_value(self):
        store = self._store()
        store.client.get.return_value = '{"user_id": 1}'
        assert await store.get("session:1") == '{"user_id": 1}'

    @pytest.mark.asyncio
    async def test_redis_error_becomes_store_unavailable(self):
        store = self._store()
        store.client.get.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(StoreUnavailableException):
            await store.get("session:1")

    @pytest.mark.asyncio
    async def test_timeout_becomes_store_unavailable(self):
        async def hang(*args, **kwargs):
            await asyncio.sleep(5)

        store = self._store(timeout=0.01)
        store.client.exists = hang

        with pytest.raises(StoreUnavailableException):
            await store.exists("blacklist:abc")

    @pytest.mark.asyncio
    async def test_task_cancellation_is_not_converted(self):
        """Only the deadline maps to StoreUnavailable; cancelling the caller propagates."""
        started = asyncio.Event()

        async def hang(*args, **kwargs):
            started.set()
            await asyncio.sleep(5)

        store = self._store(timeout=10)
        store.client.get = hang

        task = asyncio.create_task(store.get("session:1"))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_close_closes_client(self):
        store = self._store()
        await store.close()
        store.client.aclose.assert_awaited_once()


class TestStoreSelection:

    def test_memory_backend(self):
        store = build_session_store(Settings(SECRET_KEY="k", CACHE_BACKEND="memory"))
        assert isinstance(store, InMemorySessionStore)

    def test_redis_backend(self):
        settings = Settings(SECRET_KEY="k", CACHE_BACKEND="redis", REDIS_URL="redis://cache:6379/1")
        store = build_session_store(settings)
        assert isinstance(store, RedisSessionStore)
        assert store.redis_url == "redis://cache:6379/1"
