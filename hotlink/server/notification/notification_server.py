"""
Event side of the development machine.

Every connected app receives each broadcast as one newline-terminated JSON
frame. Frames sent by apps (forwarded log lines, mostly) are logged.
"""

import asyncio
from typing import Any, Coroutine, Iterable

import orjson

from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import (
    ServerDebug,
    ServerInfo,
    ServerWarning,
)

from .notification_server_protocol import NotificationServerProtocol


class NotificationServer:
    def __init__(
        self,
        host: str,
        port: int,
        project_dir: str = "",
        logger: Logger | None = None,
        bind_host: str = "0.0.0.0",
    ) -> None:
        self.host = host
        self.port = port
        self.bind_host = bind_host
        self.project_dir = project_dir

        self._logger = logger or Logger()
        self._server: asyncio.Server | None = None
        self._clients: set[NotificationServerProtocol] = set()
        self._log_tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def start(self):
        if self._server is not None:
            return

        loop = asyncio.get_running_loop()
        self._server = await loop.create_server(
            lambda: NotificationServerProtocol(self),
            self.bind_host,
            self.port,
        )

        if self.port == 0:
            _, self.port = self._server.sockets[0].getsockname()[:2]

        await self._logger.log(
            ServerInfo(
                message=f"Notification server listening on {self.host}:{self.port}",
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

    async def stop(self):
        if self._server is None:
            return

        for client in list(self._clients):
            if client.transport is not None:
                client.transport.close()

        self._clients.clear()

        self._server.close()
        await self._server.wait_closed()
        self._server = None

        if self._log_tasks:
            await asyncio.gather(*self._log_tasks, return_exceptions=True)

    def client_connected(self, client: NotificationServerProtocol):
        self._clients.add(client)
        self._log(
            ServerInfo(
                message=f"App connected from {client.peer}",
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

    def client_disconnected(
        self,
        client: NotificationServerProtocol,
        exc: Exception | None,
    ):
        self._clients.discard(client)

        if exc is None:
            message = f"App disconnected from {client.peer}"

        else:
            message = f"App connection from {client.peer} lost: {exc}"

        self._log(
            ServerInfo(
                message=message,
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

    def frame_received(self, client: NotificationServerProtocol, frame: bytes):
        try:
            payload = orjson.loads(frame)

        except orjson.JSONDecodeError:
            self._log(
                ServerWarning(
                    message=f"Malformed frame from {client.peer}: {frame[:200]!r}",
                    host=self.host,
                    port=self.port,
                    project_dir=self.project_dir,
                )
            )
            return

        if isinstance(payload, dict) and payload.get("event") == "log":
            message = f"[app {payload.get('level', 'INFO')}] {payload.get('message', '')}"

        else:
            message = f"Received from {client.peer}: {frame.decode(errors='replace')}"

        self._log(
            ServerInfo(
                message=message,
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

    def broadcast(self, payload: dict[str, Any]) -> int:
        """Send one event to every connected app. Returns how many received it."""
        frame = orjson.dumps(payload) + b"\n"
        delivered = sum(1 for client in list(self._clients) if client.write(frame))

        self._log(
            ServerDebug(
                message=f"Sent {payload.get('event')} to {delivered} app(s)",
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

        return delivered

    def send_reload(self, timer: int = 0, force: bool = False) -> int:
        """``timer`` is in milliseconds."""
        return self.broadcast(
            {
                "event": "reload",
                "timer": timer,
                "force": force,
            }
        )

    def send_reflect(self, names: Iterable[str]) -> int:
        return self.broadcast(
            {
                "event": "reflect",
                "names": list(names),
            }
        )

    def send_compilation_started(self, token: str | int) -> int:
        return self.broadcast(
            {
                "event": "alloy-compilation",
                "token": token,
            }
        )

    def send_compilation_finished(self, token: str | int) -> int:
        return self.broadcast(
            {
                "event": "alloy-compilation-done",
                "token": token,
            }
        )

    def send_debug_mode(self, value: bool = True) -> int:
        return self.broadcast(
            {
                "event": "debug-mode",
                "value": value,
            }
        )

    def _log(self, entry):
        self._spawn(self._logger.log(entry))

    def _spawn(self, coroutine: Coroutine[Any, Any, None]):
        task = asyncio.ensure_future(coroutine)
        self._log_tasks.add(task)
        task.add_done_callback(self._log_tasks.discard)
