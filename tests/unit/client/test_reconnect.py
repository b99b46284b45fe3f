"""
Tests for socket error classification, reconnect delays and the
single-timer reconnect scheduler.
"""

import asyncio
import errno

import pytest

from hotlink.client.channel import (
    ReconnectPolicy,
    ReconnectScheduler,
    SocketErrorCode,
)
from hotlink.env import Env


class TestSocketErrorCode:
    @pytest.mark.parametrize(
        "error_number,expected",
        [
            (errno.ENETUNREACH, SocketErrorCode.NETWORK_UNREACHABLE),
            (errno.EHOSTUNREACH, SocketErrorCode.NETWORK_UNREACHABLE),
            (errno.ENOTCONN, SocketErrorCode.NOT_CONNECTED),
            (errno.ECONNREFUSED, SocketErrorCode.CONNECTION_REFUSED),
            (errno.EPIPE, SocketErrorCode.OTHER),
            (None, SocketErrorCode.OTHER),
        ],
    )
    def test_from_errno(self, error_number, expected):
        assert SocketErrorCode.from_errno(error_number) == expected

    def test_from_error(self):
        """Exceptions are classified by type first, then errno."""
        assert (
            SocketErrorCode.from_error(ConnectionRefusedError())
            == SocketErrorCode.CONNECTION_REFUSED
        )
        assert (
            SocketErrorCode.from_error(OSError(errno.ENOTCONN, "not connected"))
            == SocketErrorCode.NOT_CONNECTED
        )
        assert SocketErrorCode.from_error(ValueError("boom")) == SocketErrorCode.OTHER


class TestReconnectPolicy:
    def test_default_delays(self, env: Env):
        """Only a failed connect retries fast."""
        policy = ReconnectPolicy(env)

        assert policy.delay_for(SocketErrorCode.NETWORK_UNREACHABLE) == 10.0
        assert policy.delay_for(SocketErrorCode.NOT_CONNECTED) == 1.0
        assert policy.delay_for(SocketErrorCode.CONNECTION_REFUSED) == 10.0
        assert policy.delay_for(SocketErrorCode.OTHER) == 10.0
        assert policy.closed_delay == 10.0

    def test_delays_follow_env(self):
        policy = ReconnectPolicy(
            Env(
                HOTLINK_RECONNECT_DELAY="1m",
                HOTLINK_RECONNECT_FAST_DELAY="0.5s",
            )
        )

        assert policy.delay_for(SocketErrorCode.OTHER) == 60.0
        assert policy.delay_for(SocketErrorCode.NOT_CONNECTED) == 0.5


class TestReconnectScheduler:
    @pytest.mark.asyncio
    async def test_fires_after_delay(self):
        fired = asyncio.Event()

        async def reconnect():
            fired.set()

        scheduler = ReconnectScheduler(reconnect)

        assert scheduler.schedule(0.01) is True
        assert scheduler.pending is True
        assert scheduler.delay == 0.01

        await asyncio.wait_for(fired.wait(), timeout=1)

        assert scheduler.pending is False
        assert scheduler.delay is None

    @pytest.mark.asyncio
    async def test_second_schedule_does_not_stack(self):
        """Errors arriving while a reconnect is pending add no timers."""
        calls: list[int] = []

        async def reconnect():
            calls.append(1)

        scheduler = ReconnectScheduler(reconnect)

        assert scheduler.schedule(0.02) is True
        assert scheduler.schedule(0.02) is False
        assert scheduler.schedule(0.01) is False

        await asyncio.sleep(0.1)

        assert calls == [1]

    @pytest.mark.asyncio
    async def test_cancel(self):
        calls: list[int] = []

        async def reconnect():
            calls.append(1)

        scheduler = ReconnectScheduler(reconnect)
        scheduler.schedule(0.01)
        scheduler.cancel()

        await asyncio.sleep(0.05)

        assert calls == []
        assert scheduler.pending is False

    @pytest.mark.asyncio
    async def test_reconnect_may_schedule_next_attempt(self):
        """A failing reconnect can schedule the next one from inside the timer."""
        attempts: list[int] = []
        scheduler: ReconnectScheduler | None = None

        async def reconnect():
            attempts.append(1)
            if len(attempts) < 3:
                assert scheduler.schedule(0.01) is True

        scheduler = ReconnectScheduler(reconnect)
        scheduler.schedule(0.01)

        await asyncio.sleep(0.2)

        assert len(attempts) == 3
