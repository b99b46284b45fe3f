"""
Persistent connection from the running app to the development machine.

Frames are newline-delimited JSON. The channel owns its transport and its
reconnect policy: socket errors and server-side closes are recovered by a
single scheduled reconnect, while ``end()`` closes deliberately and stops
any reconnect from happening.
"""

import asyncio
from typing import Any, Callable, Coroutine

import orjson

from hotlink.env import Env
from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import (
    ClientDebug,
    ClientInfo,
    ClientWarning,
)

from .errors import ChannelNotConnectedError
from .notification_protocol import NotificationProtocol
from .reconnect import ReconnectPolicy, ReconnectScheduler
from .socket_error_code import SocketErrorCode

ConnectionObserver = Callable[[], None]
DataObserver = Callable[[bytes], None]
CloseObserver = Callable[[], None]
ErrorObserver = Callable[[BaseException], None]


class NotificationChannel:
    def __init__(
        self,
        host: str,
        port: int,
        env: Env | None = None,
        logger: Logger | None = None,
        server_url: str | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.server_url = server_url or f"http://{host}:{port}"

        self._env = env or Env()
        self._logger = logger or Logger()
        self._policy = ReconnectPolicy(self._env)
        self._scheduler = ReconnectScheduler(self.reconnect)

        self._transport: asyncio.Transport | None = None
        self._protocol: NotificationProtocol | None = None
        self._ended = False

        self._connection_observers: list[ConnectionObserver] = []
        self._data_observers: list[DataObserver] = []
        self._close_observers: list[CloseObserver] = []
        self._error_observers: list[ErrorObserver] = []

        self._log_tasks: set[asyncio.Task] = set()

    @property
    def connected(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def policy(self) -> ReconnectPolicy:
        return self._policy

    @property
    def scheduler(self) -> ReconnectScheduler:
        return self._scheduler

    def on_connection(self, observer: ConnectionObserver):
        self._connection_observers.append(observer)

    def on_data(self, observer: DataObserver):
        self._data_observers.append(observer)

    def on_close(self, observer: CloseObserver):
        self._close_observers.append(observer)

    def on_error(self, observer: ErrorObserver):
        self._error_observers.append(observer)

    async def connect(self):
        if self.connected:
            return

        self._ended = False
        loop = asyncio.get_running_loop()

        try:
            await loop.create_connection(
                lambda: NotificationProtocol(self),
                self.host,
                self.port,
            )

        except OSError as connect_error:
            self.handle_error(connect_error)

    async def reconnect(self):
        self._teardown()
        await self.connect()

    def end(self):
        self._ended = True
        self._scheduler.cancel()
        self._teardown()

    async def send(self, payload: dict[str, Any]):
        if not self.connected:
            raise ChannelNotConnectedError(
                f"Notification channel to {self.host}:{self.port} is not connected"
            )

        self._transport.write(orjson.dumps(payload) + b"\n")

    def _teardown(self):
        transport = self._transport

        # Dropping the protocol first makes its connection_lost a no-op.
        self._protocol = None
        self._transport = None

        if transport is not None and not transport.is_closing():
            transport.close()

    def connection_made(
        self,
        protocol: NotificationProtocol,
        transport: asyncio.Transport,
    ):
        if self._ended:
            transport.close()
            return

        self._protocol = protocol
        self._transport = transport

        self._log(
            ClientInfo(
                message=f"Connection established to {self.host}:{self.port}",
                host=self.host,
                port=self.port,
            )
        )

        for observer in list(self._connection_observers):
            observer()

    def frame_received(self, protocol: NotificationProtocol, frame: bytes):
        if protocol is not self._protocol:
            return

        for observer in list(self._data_observers):
            observer(frame)

    def connection_lost(
        self,
        protocol: NotificationProtocol,
        exc: Exception | None,
    ):
        if protocol is not self._protocol:
            return

        self._protocol = None
        self._transport = None

        if self._ended:
            return

        if exc is None:
            self.handle_close()

        else:
            self.handle_error(exc)

    def handle_close(self):
        delay = self._policy.closed_delay
        self._scheduler.schedule(delay)

        self._log(
            ClientWarning(
                message=f"Notification server closed the connection. Reconnecting in {delay:g}s",
                host=self.host,
                port=self.port,
            )
        )

        for observer in list(self._close_observers):
            observer()

    def handle_error(self, error: BaseException):
        code = SocketErrorCode.from_error(error)
        delay = self._policy.delay_for(code)
        scheduled = self._scheduler.schedule(delay)

        match code:
            case SocketErrorCode.NETWORK_UNREACHABLE:
                message = f"Network unreachable. Reconnecting in {delay:g}s"

            case SocketErrorCode.NOT_CONNECTED:
                message = f"Connection failed. Reconnecting in {delay:g}s"

            case SocketErrorCode.CONNECTION_REFUSED:
                message = (
                    f"Connection refused. Check the server is alive: {self.server_url}"
                )

            case _:
                message = f"Socket error: {error}. Reconnecting in {delay:g}s"

        if scheduled:
            self._log(
                ClientWarning(
                    message=message,
                    host=self.host,
                    port=self.port,
                )
            )

        else:
            self._log(
                ClientDebug(
                    message=f"Reconnect already scheduled, ignoring {code.value} error",
                    host=self.host,
                    port=self.port,
                )
            )

        for observer in list(self._error_observers):
            observer(error)

    def _log(self, entry):
        self._spawn(self._logger.log(entry))

    def _spawn(self, coroutine: Coroutine[Any, Any, None]):
        task = asyncio.ensure_future(coroutine)
        self._log_tasks.add(task)
        task.add_done_callback(self._log_tasks.discard)
