"""
Tests for MainProcess hooks and notification helpers.
"""

import pathlib
from typing import Any

import aiohttp
import pytest

from hotlink.env import Env
from hotlink.server import MainProcess, find_open_ports
from tests.unit.mocks import RecordingLogger


class BroadcastRecorder:
    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []

    def __call__(self, payload: dict[str, Any]) -> int:
        self.payloads.append(payload)
        return 1


def make_process(tmp_path: pathlib.Path, logger: RecordingLogger) -> MainProcess:
    f_port, e_port = find_open_ports(21000, count=2)

    return MainProcess(
        str(tmp_path),
        platform="android",
        f_port=f_port,
        e_port=e_port,
        host="127.0.0.1",
        env=Env(HOTLINK_DEBUG_MODE=True),
        logger=logger,
    )


class TestMainProcess:
    def test_url(self, tmp_path, logger):
        process = make_process(tmp_path, logger)

        assert process.url == f"http://127.0.0.1:{process.f_port}"

    @pytest.mark.asyncio
    async def test_write_entry_module(self, tmp_path, logger):
        process = make_process(tmp_path, logger)
        destination = tmp_path / "build" / "app.py"
        destination.parent.mkdir()

        result = await process.write_entry_module(str(destination))

        assert result.ok is True
        assert result.value == str(destination)
        assert f'"fPort":{process.f_port}' in destination.read_text()

    @pytest.mark.asyncio
    async def test_write_entry_module_failure_is_a_result(self, tmp_path, logger):
        process = make_process(tmp_path, logger)

        result = await process.write_entry_module(str(tmp_path / "missing" / "app.py"))

        assert result.ok is False
        assert isinstance(result.error, FileNotFoundError)

    @pytest.mark.asyncio
    async def test_compilation_brackets_events(self, tmp_path, logger):
        process = make_process(tmp_path, logger)
        recorder = BroadcastRecorder()
        process.notification_server.broadcast = recorder

        async with process.compilation("build-7") as token:
            assert token == "build-7"
            assert recorder.payloads == [
                {"event": "alloy-compilation", "token": "build-7"}
            ]

        assert recorder.payloads[-1] == {
            "event": "alloy-compilation-done",
            "token": "build-7",
        }

    @pytest.mark.asyncio
    async def test_force_reload_and_debug_mode(self, tmp_path, logger):
        process = make_process(tmp_path, logger)
        recorder = BroadcastRecorder()
        process.notification_server.broadcast = recorder

        await process.force_reload()
        process.set_debug_mode(False)
        process.reflect(["ui.window"])

        assert recorder.payloads == [
            {"event": "reload", "timer": 0, "force": True},
            {"event": "debug-mode", "value": False},
            {"event": "reflect", "names": ["ui.window"]},
        ]
        assert process.preferences.debug_mode is False

    @pytest.mark.asyncio
    async def test_launch_servers_and_shutdown(self, tmp_path, logger):
        process = make_process(tmp_path, logger)

        result = await process.launch_servers()

        try:
            assert result.ok is True
            assert process.content_server.running is True
            assert process.notification_server.running is True

            async with aiohttp.ClientSession() as session:
                async with session.get(f"{process.url}/prefs") as response:
                    preferences = await response.json()

            assert preferences == {"debug_mode": True, "log_level": None}

        finally:
            await process.shutdown()

        assert process.content_server.running is False
        assert process.notification_server.running is False
        assert logger.closed is True
