import asyncio
from typing import Awaitable, Callable

from hotlink.env import Env

from .socket_error_code import SocketErrorCode


class ReconnectPolicy:
    """
    Maps a classified socket error to a reconnect delay.

    A failed connect right after startup is usually a race with the server
    coming up, so NOT_CONNECTED retries fast. Everything else waits the
    default delay.
    """

    def __init__(self, env: Env | None = None) -> None:
        delays = (env or Env()).get_reconnect_delays()

        self._default_delay = delays["default"]
        self._delays: dict[SocketErrorCode, float] = {
            SocketErrorCode.NETWORK_UNREACHABLE: delays["default"],
            SocketErrorCode.NOT_CONNECTED: delays["fast"],
            SocketErrorCode.CONNECTION_REFUSED: delays["default"],
            SocketErrorCode.OTHER: delays["default"],
        }

    @property
    def closed_delay(self) -> float:
        return self._default_delay

    def delay_for(self, code: SocketErrorCode) -> float:
        return self._delays.get(code, self._default_delay)


class ReconnectScheduler:
    """
    Holds at most one outstanding reconnect timer.

    Errors arriving while a reconnect is already scheduled do not stack
    another timer. The timer is an asyncio task, so it can be cancelled.
    """

    def __init__(self, reconnect: Callable[[], Awaitable[None]]) -> None:
        self._reconnect = reconnect
        self._task: asyncio.Task | None = None
        self._delay: float | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def delay(self) -> float | None:
        return self._delay if self.pending else None

    def schedule(self, delay: float) -> bool:
        if self.pending:
            return False

        self._delay = delay
        self._task = asyncio.create_task(self._run(delay))

        return True

    async def _run(self, delay: float):
        await asyncio.sleep(delay)

        # Cleared before reconnecting so a failure inside reconnect can
        # schedule the next attempt.
        self._task = None
        self._delay = None

        await self._reconnect()

    def cancel(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self._task = None
        self._delay = None
