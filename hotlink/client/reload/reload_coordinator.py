"""
Decides when the running application restarts.

Every accepted ReloadRequest bumps the pending counter and starts its own
timer. When a timer fires the counter drops by one and the gate is
evaluated:

    proceed = request.force or (not compiling and pending == 0)

so overlapping requests collapse into a single restart issued by the last
one to fire, and nothing restarts while the development machine is still
compiling unless forced.
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, Protocol

from hotlink.client.compilation import CompilationStateTracker
from hotlink.client.host import HostRuntime
from hotlink.client.modules import ModuleCache
from hotlink.constants import DEFAULT_ENTRY_MODULE
from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import ClientDebug, ClientInfo

from .reload_outcome import ReloadOutcome
from .reload_request import ReloadRequest


Enter = Callable[[], Awaitable[Any]]


class Channel(Protocol):
    def end(self) -> None: ...

    async def connect(self) -> None: ...


class ReloadCoordinator:
    def __init__(
        self,
        compilation: CompilationStateTracker,
        channel: Channel,
        modules: ModuleCache,
        host: HostRuntime,
        url: str,
        logger: Logger | None = None,
        entry_module: str = DEFAULT_ENTRY_MODULE,
    ) -> None:
        self._compilation = compilation
        self._channel = channel
        self._modules = modules
        self._host = host
        self._logger = logger or Logger()
        self.url = url
        self.entry_module = entry_module

        self._pending = 0
        self._timers: set[asyncio.Task[ReloadOutcome]] = set()
        self.restart_attempts = 0
        self._enter: Enter | None = None

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def idle(self) -> bool:
        return self._pending == 0

    def on_enter(self, enter: Enter):
        """
        Replace how re-entry runs the entry module. Without one, re-entry
        awaits ``require`` of the entry module directly.
        """
        self._enter = enter

    def accept(self, request: ReloadRequest) -> asyncio.Task[ReloadOutcome]:
        self._pending += 1

        timer = asyncio.create_task(self._fire_after(request))
        self._timers.add(timer)
        timer.add_done_callback(self._timers.discard)

        return timer

    async def _fire_after(self, request: ReloadRequest) -> ReloadOutcome:
        try:
            await asyncio.sleep(request.timer)

        except asyncio.CancelledError:
            self._pending = max(0, self._pending - 1)
            raise

        self._pending = max(0, self._pending - 1)

        return await self.evaluate(request)

    async def evaluate(self, request: ReloadRequest) -> ReloadOutcome:
        proceed = request.force or (
            not self._compilation.compiling and self._pending == 0
        )

        if not proceed:
            await self._logger.log(
                ClientInfo(
                    message=(
                        "Reload suppressed because compilations or other reloads are "
                        f"still pending. Use the dashboard reload button to force reloading: {self.url}"
                    ),
                    host="app",
                    port=0,
                )
            )

            return ReloadOutcome.SUPPRESSED

        return await self.restart()

    async def restart(self) -> ReloadOutcome:
        self.restart_attempts += 1

        # Closed first so no event lands mid-restart.
        self._channel.end()

        if self._host.supports_restart:
            await self._logger.log(
                ClientInfo(
                    message="Restarting app",
                    host="app",
                    port=0,
                )
            )

            if self._host.restart():
                return ReloadOutcome.RESTARTED

        return await self.reenter()

    async def reenter(self) -> ReloadOutcome:
        await self._logger.log(
            ClientInfo(
                message=f"Re-entering app from {self.entry_module}",
                host="app",
                port=0,
            )
        )

        self._modules.clear_all_caches()

        if self._enter is None:
            await self._modules.require(self.entry_module)

        else:
            await self._enter()

        await self._channel.connect()

        return ReloadOutcome.REENTERED

    async def reflect(self, names: Iterable[str]):
        for name in names:
            await self._logger.log(
                ClientDebug(
                    message=f"Clearing cache {name}",
                    host="app",
                    port=0,
                )
            )

            self._modules.clear_cache(name)

    def cancel_pending(self):
        for timer in list(self._timers):
            timer.cancel()

        self._timers.clear()
        self._pending = 0
