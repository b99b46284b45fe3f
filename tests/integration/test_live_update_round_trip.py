"""
End-to-end run of the live update loop: content and notification servers
on the development side, LiveUpdateClient on the app side.
"""

import asyncio
import pathlib
import types
from typing import Callable

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from hotlink.client.live_client import LiveUpdateClient
from hotlink.env import Env
from hotlink.server.http import ContentServer
from hotlink.server.notification import NotificationServer
from tests.unit.mocks import RecordingLogger


async def eventually(predicate: Callable[[], bool], timeout: float = 3.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")

        await asyncio.sleep(0.01)


@pytest.fixture
def project(tmp_path: pathlib.Path) -> pathlib.Path:
    resources = tmp_path / "Resources"
    resources.mkdir()
    (resources / "app.py").write_text(
        'helpers = await require("helpers")\nstarts = helpers.mark()\n'
    )
    (resources / "helpers.py").write_text(
        "def mark():\n"
        "    __global__.marks = getattr(__global__, 'marks', 0) + 1\n"
        "    return __global__.marks\n"
    )
    return tmp_path


@pytest_asyncio.fixture
async def servers(project: pathlib.Path):
    logger = RecordingLogger()

    content_server = ContentServer("127.0.0.1", 0, str(project), logger=logger)
    http_server = TestServer(content_server.app, host="127.0.0.1")
    await http_server.start_server()

    notification_server = NotificationServer(
        "127.0.0.1",
        0,
        project_dir=str(project),
        logger=logger,
        bind_host="127.0.0.1",
    )
    await notification_server.start()

    yield http_server, notification_server, logger

    await notification_server.stop()
    await http_server.close()


class TestLiveUpdateRoundTrip:
    @pytest.mark.asyncio
    async def test_start_suppress_and_reenter(self, servers):
        http_server, notification_server, server_logger = servers
        global_object = types.SimpleNamespace()
        client_logger = RecordingLogger()

        client = LiveUpdateClient.create(
            global_object,
            {
                "fPort": http_server.port,
                "ePort": notification_server.port,
                "host": "127.0.0.1",
            },
            env=Env(HOTLINK_LOG_LEVEL="error"),
            logger=client_logger,
        )

        try:
            await client.start_app()

            assert global_object.marks == 1
            assert global_object.starts == 1

            await eventually(lambda: notification_server.client_count == 1)

            notification_server.send_compilation_started("build-1")
            await eventually(lambda: client.compilation.compiling)

            notification_server.send_reload(timer=0)
            await eventually(
                lambda: any("suppressed" in message for message in client_logger.messages())
            )

            assert global_object.marks == 1

            notification_server.send_compilation_finished("build-1")
            await eventually(lambda: not client.compilation.compiling)

            notification_server.send_reload(timer=0)
            await eventually(lambda: global_object.marks == 2)
            await eventually(lambda: client.channel.connected)
            await eventually(lambda: notification_server.client_count == 1)

            assert global_object.starts == 2

        finally:
            await client.stop()

    @pytest.mark.asyncio
    async def test_reflect_and_forwarded_logs(self, servers):
        http_server, notification_server, server_logger = servers
        global_object = types.SimpleNamespace()
        client_logger = RecordingLogger()

        client = LiveUpdateClient.create(
            global_object,
            {
                "fPort": http_server.port,
                "ePort": notification_server.port,
                "host": "127.0.0.1",
            },
            env=Env(HOTLINK_LOG_LEVEL="error"),
            logger=client_logger,
        )

        try:
            await client.start_app()
            await eventually(lambda: client.channel.connected)

            notification_server.send_reflect(["helpers"])
            await eventually(lambda: "helpers" not in client.modules)

            assert "app" in client.modules

            await client.forward_log("hello from the app")
            await eventually(
                lambda: any(
                    "hello from the app" in message
                    for message in server_logger.messages()
                )
            )

        finally:
            await client.stop()
