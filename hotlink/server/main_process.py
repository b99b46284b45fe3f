"""
Composition root of the development machine.

Owns the content server (module sources, resources, dashboard) and the
notification server (events pushed to the running app), and exposes the
build-pipeline operations as hooks.
"""

from __future__ import annotations

import asyncio
import contextlib
import pathlib
import uuid
from typing import AsyncIterator, Iterable

from hotlink.env import Env, load_env
from hotlink.logging import Logger, LoggingConfig
from hotlink.logging.hotlink_logging_models import ServerInfo

from .entry_code import generate_entry_code
from .hooks import hook
from .http import ContentServer
from .notification import NotificationServer
from .ports import find_open_ports, get_address
from .responder import ContentResponder, PreferencesResponder


class MainProcess:
    def __init__(
        self,
        project_dir: str,
        platform: str | None = None,
        f_port: int = 4157,
        e_port: int = 4158,
        host: str = "localhost",
        env: Env | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.project_dir = str(pathlib.Path(project_dir).resolve())
        self.platform = platform
        self.f_port = f_port
        self.e_port = e_port
        self.host = host
        self.env = env or Env()

        self._logger = logger or Logger()

        self.responder = ContentResponder(
            dashboard_directory=self.env.HOTLINK_DASHBOARD_DIRECTORY,
            resources_directory=self.env.HOTLINK_RESOURCES_DIRECTORY,
            entry_module=self.env.HOTLINK_ENTRY_MODULE,
            logger=self._logger,
        )
        self.preferences = PreferencesResponder(
            debug_mode=self.env.HOTLINK_DEBUG_MODE,
        )

        self.content_server = ContentServer(
            host,
            f_port,
            self.project_dir,
            platform=platform,
            responder=self.responder,
            preferences=self.preferences,
            on_reload=self.force_reload,
            logger=self._logger,
        )
        self.notification_server = NotificationServer(
            host,
            e_port,
            project_dir=self.project_dir,
            logger=self._logger,
        )

    @classmethod
    async def create(
        cls,
        project_dir: str,
        platform: str | None = None,
        env: Env | None = None,
        logger: Logger | None = None,
    ) -> MainProcess:
        env = env or load_env(Env)

        LoggingConfig().update(
            log_level=env.HOTLINK_LOG_LEVEL,
            log_output=env.HOTLINK_LOG_OUTPUT,
        )

        loop = asyncio.get_running_loop()
        f_port, e_port = await loop.run_in_executor(
            None,
            find_open_ports,
            env.HOTLINK_BASE_PORT,
            2,
        )

        host = env.HOTLINK_HOST or await loop.run_in_executor(None, get_address)

        return cls(
            project_dir,
            platform=platform,
            f_port=f_port,
            e_port=e_port,
            host=host,
            env=env,
            logger=logger,
        )

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.f_port}"

    @hook
    async def launch_servers(self):
        await self.content_server.start()
        await self.notification_server.start()

        await self._logger.log(
            ServerInfo(
                message=f"Access the live update dashboard at {self.url}",
                host=self.host,
                port=self.f_port,
                project_dir=self.project_dir,
            )
        )

    @hook
    async def write_entry_module(self, path: str, registered: bool = False) -> str:
        code = generate_entry_code(
            self.f_port,
            self.e_port,
            self.host,
            registered=registered,
        )

        destination = pathlib.Path(path)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, destination.write_text, code)

        await self._logger.log(
            ServerInfo(
                message=f"Wrote live update entry module to {destination}",
                host=self.host,
                port=self.f_port,
                project_dir=self.project_dir,
            )
        )

        return str(destination)

    def reload(self, timer: int = 0, force: bool = False) -> int:
        return self.notification_server.send_reload(timer=timer, force=force)

    async def force_reload(self):
        self.reload(force=True)

    def reflect(self, names: Iterable[str]) -> int:
        return self.notification_server.send_reflect(names)

    def compilation_started(self, token: str | int) -> int:
        return self.notification_server.send_compilation_started(token)

    def compilation_finished(self, token: str | int) -> int:
        return self.notification_server.send_compilation_finished(token)

    @contextlib.asynccontextmanager
    async def compilation(self, token: str | int | None = None) -> AsyncIterator[str | int]:
        """Bracket a compilation so connected apps hold reloads until it ends."""
        if token is None:
            token = uuid.uuid4().hex

        self.compilation_started(token)

        try:
            yield token

        finally:
            self.compilation_finished(token)

    def set_debug_mode(self, value: bool = True) -> int:
        self.preferences.debug_mode = value
        return self.notification_server.send_debug_mode(value)

    async def shutdown(self):
        await self.notification_server.stop()
        await self.content_server.stop()
        await self._logger.close()
