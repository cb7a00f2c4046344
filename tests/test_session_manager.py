"""Tests for session records, blacklist, active markers and the permission cache."""

from datetime import timedelta

import pytest

from manage_backend.domain.exceptions import (
    InvalidRefreshTokenException,
    PermissionsNotCachedException,
    RefreshMismatchException,
    SessionNotFoundException,
    StoreUnavailableException,
    TokenRevokedException,
)
from manage_backend.services.session_manager import SessionManager, session_key
from tests.fakes import FailingSessionStore


class TestSessionRecords:

    @pytest.mark.asyncio
    async def test_create_then_get(self, session_manager, codec):
        pair = codec.issue_pair(1, "alice", "user")
        await session_manager.create_session(1, "alice", pair.refresh_token, "laptop", "10.0.0.1", "curl/8")

        record = await session_manager.get_session(1)
        assert record.username == "alice"
        assert record.refresh_token == pair.refresh_token
        assert (record.device_info, record.ip_address, record.user_agent) == ("laptop", "10.0.0.1", "curl/8")
        assert record.login_time == record.last_activity

    @pytest.mark.asyncio
    async def test_missing_session(self, session_manager):
        with pytest.raises(SessionNotFoundException):
            await session_manager.get_session(404)

    @pytest.mark.asyncio
    async def test_session_expires_with_refresh_lifetime(self, session_manager, codec, clock, settings):
        await session_manager.create_session(1, "alice", codec.issue_pair(1, "alice", "user").refresh_token)

        clock.advance(settings.refresh_token_lifetime.total_seconds())
        with pytest.raises(SessionNotFoundException):
            await session_manager.get_session(1)

    @pytest.mark.asyncio
    async def test_undecodable_record_counts_as_missing(self, session_manager, store):
        await store.set(session_key(1), "{not json", timedelta(minutes=5))
        with pytest.raises(SessionNotFoundException):
            await session_manager.get_session(1)

    @pytest.mark.asyncio
    async def test_update_last_activity_keeps_refresh_token(self, session_manager, codec, clock, settings):
        token = codec.issue_pair(1, "alice", "user").refresh_token
        await session_manager.create_session(1, "alice", token)
        first = await session_manager.get_session(1)

        clock.advance(settings.refresh_token_lifetime.total_seconds() - 10)
        await session_manager.update_last_activity(1)
        clock.advance(60)

        record = await session_manager.get_session(1)
        assert record.refresh_token == token
        assert record.login_time == first.login_time
        assert record.last_activity >= first.last_activity

    @pytest.mark.asyncio
    async def test_update_last_activity_without_session(self, session_manager):
        with pytest.raises(SessionNotFoundException):
            await session_manager.update_last_activity(1)

    @pytest.mark.asyncio
    async def test_delete_session(self, session_manager, codec):
        await session_manager.create_session(1, "alice", codec.issue_pair(1, "alice", "user").refresh_token)
        await session_manager.delete_session(1)
        await session_manager.delete_session(1)

        with pytest.raises(SessionNotFoundException):
            await session_manager.get_session(1)


class TestValidateRefresh:
    """Presented refresh tokens must match the stored session byte for byte."""

    @pytest.mark.asyncio
    async def test_current_token_is_accepted(self, session_manager, codec):
        pair = codec.issue_pair(1, "alice", "user")
        await session_manager.create_session(1, "alice", pair.refresh_token)

        record = await session_manager.validate_refresh(pair.refresh_token)
        assert record.user_id == 1

    @pytest.mark.asyncio
    async def test_superseded_token_is_rejected(self, session_manager, codec):
        """A second login replaces the session, so the first refresh token stops working."""
        first = codec.issue_pair(1, "alice", "user")
        await session_manager.create_session(1, "alice", first.refresh_token)
        second = codec.issue_pair(1, "alice", "user")
        await session_manager.create_session(1, "alice", second.refresh_token)

        with pytest.raises(RefreshMismatchException):
            await session_manager.validate_refresh(first.refresh_token)
        assert (await session_manager.validate_refresh(second.refresh_token)).refresh_token == second.refresh_token

    @pytest.mark.asyncio
    async def test_no_session(self, session_manager, codec):
        with pytest.raises(SessionNotFoundException):
            await session_manager.validate_refresh(codec.issue_pair(1, "alice", "user").refresh_token)

    @pytest.mark.asyncio
    async def test_blacklisted_token(self, session_manager, codec):
        pair = codec.issue_pair(1, "alice", "user")
        await session_manager.create_session(1, "alice", pair.refresh_token)
        claims = codec.verify_refresh(pair.refresh_token)
        await session_manager.blacklist(claims.token_id, timedelta(minutes=5))

        with pytest.raises(TokenRevokedException):
            await session_manager.validate_refresh(pair.refresh_token)

    @pytest.mark.asyncio
    async def test_access_token_is_rejected(self, session_manager, codec):
        pair = codec.issue_pair(1, "alice", "user")
        await session_manager.create_session(1, "alice", pair.refresh_token)

        with pytest.raises(InvalidRefreshTokenException):
            await session_manager.validate_refresh(pair.access_token)

    @pytest.mark.asyncio
    async def test_garbage_is_rejected(self, session_manager):
        with pytest.raises(InvalidRefreshTokenException):
            await session_manager.validate_refresh("garbage")


class TestBlacklist:

    @pytest.mark.asyncio
    async def test_entry_expires_with_ttl(self, session_manager, clock):
        await session_manager.blacklist("jti-1", timedelta(seconds=60))
        assert await session_manager.is_blacklisted("jti-1")

        clock.advance(60)
        assert not await session_manager.is_blacklisted("jti-1")

    @pytest.mark.asyncio
    async def test_non_positive_ttl_writes_nothing(self, session_manager):
        await session_manager.blacklist("jti-1", timedelta(0))
        await session_manager.blacklist("jti-2", timedelta(seconds=-5))

        assert not await session_manager.is_blacklisted("jti-1")
        assert not await session_manager.is_blacklisted("jti-2")


class TestStoreFailures:
    """Primary checks fail closed, the blacklist and active marker fail open."""

    @pytest.fixture
    def failing(self, codec, settings):
        return SessionManager(FailingSessionStore(), codec, settings)

    @pytest.mark.asyncio
    async def test_blacklist_lookup_fails_open(self, failing):
        assert await failing.is_blacklisted("jti-1") is False

    @pytest.mark.asyncio
    async def test_active_marker_fails_open(self, failing):
        await failing.set_active(1)
        assert await failing.is_active(1) is False

    @pytest.mark.asyncio
    async def test_session_lookup_fails_closed(self, failing):
        with pytest.raises(StoreUnavailableException):
            await failing.get_session(1)

    @pytest.mark.asyncio
    async def test_session_write_fails_closed(self, failing):
        with pytest.raises(StoreUnavailableException):
            await failing.create_session(1, "alice", "token")

    @pytest.mark.asyncio
    async def test_blacklist_write_fails_closed(self, failing):
        with pytest.raises(StoreUnavailableException):
            await failing.blacklist("jti-1", timedelta(minutes=1))


class TestActiveMarker:

    @pytest.mark.asyncio
    async def test_marker_expires(self, session_manager, clock, settings):
        assert not await session_manager.is_active(1)

        await session_manager.set_active(1)
        assert await session_manager.is_active(1)

        clock.advance(settings.active_marker_ttl.total_seconds())
        assert not await session_manager.is_active(1)


class TestPermissionCache:

    @pytest.mark.asyncio
    async def test_round_trip(self, session_manager):
        await session_manager.cache_permissions(1, "admin", ["users:read", "users:delete"])
        assert await session_manager.get_cached_permissions(1) == ("admin", ["users:read", "users:delete"])

    @pytest.mark.asyncio
    async def test_miss(self, session_manager):
        with pytest.raises(PermissionsNotCachedException):
            await session_manager.get_cached_permissions(1)

    @pytest.mark.asyncio
    async def test_entry_expires(self, session_manager, clock, settings):
        await session_manager.cache_permissions(1, "user", ["profile:read"])
        clock.advance(settings.permission_cache_ttl.total_seconds())

        with pytest.raises(PermissionsNotCachedException):
            await session_manager.get_cached_permissions(1)
