"""Tests for messaging/rate_limit.py."""

from unittest.mock import AsyncMock, patch

import pytest

from messaging.rate_limit import SlackRateLimiter


def test_not_blocked_initially():
    limiter = SlackRateLimiter(5, 1.0)
    assert not limiter.is_blocked()
    assert limiter.remaining_wait() == 0


def test_set_blocked():
    limiter = SlackRateLimiter()
    limiter.set_blocked(30)
    assert limiter.is_blocked()
    assert 0 < limiter.remaining_wait() <= 30


@pytest.mark.asyncio
async def test_wait_if_blocked_passes_when_free():
    limiter = SlackRateLimiter(5, 1.0)
    assert await limiter.wait_if_blocked() is False


@pytest.mark.asyncio
async def test_wait_if_blocked_sleeps_reactively():
    limiter = SlackRateLimiter(5, 1.0)
    limiter.set_blocked(2)
    with patch("messaging.rate_limit.asyncio.sleep", new_callable=AsyncMock) as sleep:
        assert await limiter.wait_if_blocked() is True
    sleep.assert_awaited_once()
    assert 0 < sleep.await_args[0][0] <= 2


@pytest.mark.asyncio
async def test_expired_block_does_not_sleep():
    limiter = SlackRateLimiter(5, 1.0)
    limiter.set_blocked(0)
    with patch("messaging.rate_limit.asyncio.sleep", new_callable=AsyncMock) as sleep:
        assert await limiter.wait_if_blocked() is False
    sleep.assert_not_awaited()
    assert limiter.remaining_wait() == 0
