"""
Unit tests for rate limiting (in-memory fallback and Redis path).
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chenaniah.core.rate_limit import (
    ACCOUNT_CHANGE,
    LOGIN,
    check_rate_limit,
    client_key,
    purge_memory_store,
)


class TestMemoryRateLimit:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        with patch("chenaniah.core.rate_limit.get_redis", return_value=None):
            results = [await check_rate_limit("rate_limit:test", 3, 60) for _ in range(4)]

        assert results == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        with patch("chenaniah.core.rate_limit.get_redis", return_value=None):
            assert await check_rate_limit("rate_limit:a", 1, 60)
            assert not await check_rate_limit("rate_limit:a", 1, 60)
            assert await check_rate_limit("rate_limit:b", 1, 60)


class TestRedisRateLimit:
    @pytest.mark.asyncio
    async def test_uses_redis_count(self):
        pipe = MagicMock()
        pipe.__aenter__.return_value = pipe
        pipe.execute = AsyncMock(return_value=[0, 5, 1, True])
        client = MagicMock()
        client.pipeline.return_value = pipe

        with patch("chenaniah.core.rate_limit.get_redis", return_value=client):
            assert not await check_rate_limit("rate_limit:redis", 5, 60)
            pipe.execute.return_value = [0, 2, 1, True]
            assert await check_rate_limit("rate_limit:redis", 5, 60)

    @pytest.mark.asyncio
    async def test_falls_back_to_memory_when_redis_fails(self):
        pipe = MagicMock()
        pipe.__aenter__.return_value = pipe
        pipe.execute = AsyncMock(side_effect=ConnectionError("redis down"))
        client = MagicMock()
        client.pipeline.return_value = pipe

        with patch("chenaniah.core.rate_limit.get_redis", return_value=client):
            assert await check_rate_limit("rate_limit:fallback", 1, 60)
            assert not await check_rate_limit("rate_limit:fallback", 1, 60)


class TestPurgeMemoryStore:
    @pytest.mark.asyncio
    async def test_drops_only_idle_keys(self):
        with (
            patch("chenaniah.core.rate_limit.get_redis", return_value=None),
            patch("chenaniah.core.rate_limit.time.time", return_value=1_000.0),
        ):
            await check_rate_limit("rate_limit:old", 5, 60)

        with (
            patch("chenaniah.core.rate_limit.get_redis", return_value=None),
            patch("chenaniah.core.rate_limit.time.time", return_value=5_000.0),
        ):
            await check_rate_limit("rate_limit:recent", 5, 60)
            removed = purge_memory_store(3_600)

            assert removed == 1
            # The recent key keeps its window
            assert await check_rate_limit("rate_limit:recent", 2, 60)
            assert not await check_rate_limit("rate_limit:recent", 2, 60)


class TestPolicies:
    def test_account_changes_are_stricter_than_logins(self):
        assert ACCOUNT_CHANGE.limit < LOGIN.limit
        assert ACCOUNT_CHANGE.window_seconds > LOGIN.window_seconds

    def test_client_key_combines_ip_and_path(self):
        request = MagicMock()
        request.client.host = "10.0.0.7"
        request.url.path = "/api/auth/login"

        assert client_key(request) == "rate_limit:10.0.0.7:/api/auth/login"
