"""
Tests for NotificationChannel error handling and reconnect scheduling.
"""

import asyncio
import errno

import pytest

from hotlink.client.channel import (
    ChannelNotConnectedError,
    NotificationChannel,
)
from hotlink.env import Env
from hotlink.logging import LogLevel
from tests.unit.mocks import RecordingLogger


def make_channel(port: int, env: Env, logger: RecordingLogger) -> NotificationChannel:
    return NotificationChannel(
        "127.0.0.1",
        port,
        env=env,
        logger=logger,
        server_url="http://127.0.0.1:4157",
    )


class TestNotificationChannelErrors:
    """Error classification drives the single scheduled reconnect."""

    @pytest.mark.asyncio
    async def test_refused_connect_schedules_reconnect(
        self,
        unused_port: int,
        env: Env,
        logger: RecordingLogger,
    ):
        """A refused connect is routed through the error path with a 10s delay."""
        channel = make_channel(unused_port, env, logger)
        errors: list[BaseException] = []
        channel.on_error(errors.append)

        await channel.connect()
        await asyncio.sleep(0)

        try:
            assert channel.connected is False
            assert channel.scheduler.pending is True
            assert channel.scheduler.delay == 10.0
            assert len(errors) == 1

            warnings = logger.messages(LogLevel.WARN)
            assert any("http://127.0.0.1:4157" in message for message in warnings)

        finally:
            channel.end()

    @pytest.mark.asyncio
    async def test_not_connected_retries_fast(self, env: Env, logger: RecordingLogger):
        channel = make_channel(1, env, logger)

        channel.handle_error(OSError(errno.ENOTCONN, "Socket is not connected"))
        await asyncio.sleep(0)

        try:
            assert channel.scheduler.delay == 1.0
            assert any(
                "Reconnecting in 1s" in message
                for message in logger.messages(LogLevel.WARN)
            )

        finally:
            channel.end()

    @pytest.mark.asyncio
    async def test_errors_do_not_stack_timers(self, env: Env, logger: RecordingLogger):
        """A second error before the reconnect fires keeps the first timer."""
        channel = make_channel(1, env, logger)

        channel.handle_error(OSError(errno.ENETUNREACH, "Network is unreachable"))
        first_timer = channel.scheduler._task

        channel.handle_error(OSError(errno.ENOTCONN, "Socket is not connected"))
        await asyncio.sleep(0)

        try:
            assert channel.scheduler._task is first_timer
            assert channel.scheduler.delay == 10.0
            assert any(
                "already scheduled" in message
                for message in logger.messages(LogLevel.DEBUG)
            )

        finally:
            channel.end()

    @pytest.mark.asyncio
    async def test_server_close_schedules_reconnect(
        self,
        env: Env,
        logger: RecordingLogger,
    ):
        channel = make_channel(1, env, logger)
        closes: list[int] = []
        channel.on_close(lambda: closes.append(1))

        channel.handle_close()

        try:
            assert closes == [1]
            assert channel.scheduler.pending is True
            assert channel.scheduler.delay == 10.0

        finally:
            channel.end()

    @pytest.mark.asyncio
    async def test_end_cancels_pending_reconnect(
        self,
        env: Env,
        logger: RecordingLogger,
    ):
        """A deliberate close is never followed by a reconnect."""
        channel = make_channel(1, env, logger)
        channel.handle_close()

        channel.end()

        assert channel.ended is True
        assert channel.scheduler.pending is False

    @pytest.mark.asyncio
    async def test_send_requires_connection(self, env: Env, logger: RecordingLogger):
        channel = make_channel(1, env, logger)

        with pytest.raises(ChannelNotConnectedError):
            await channel.send({"event": "log", "message": "hello"})
