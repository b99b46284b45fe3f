"""
In-app composition root.

``LiveUpdateClient`` wires the notification channel, compilation tracker,
module cache and reload coordinator together and dispatches channel events
to them one at a time, in arrival order. ``run`` is the factory the
generated bootstrap calls with the application's global object and the
``{fPort, ePort, host}`` options.
"""

from __future__ import annotations

import asyncio
import types
from typing import Any, Coroutine, Mapping

import msgspec

from hotlink.env import Env, load_env
from hotlink.logging import Logger, LoggingConfig, LogLevel
from hotlink.logging.hotlink_logging_models import (
    ClientDebug,
    ClientError,
    ClientInfo,
    ClientTrace,
    ClientWarning,
)

from .channel import NotificationChannel
from .compilation import CompilationStateTracker
from .events import (
    CompilationFinished,
    CompilationStarted,
    DebugModeEvent,
    MalformedEventError,
    ReflectEvent,
    ReloadEvent,
    decode_event,
)
from .host import HostRuntime, exec_restart
from .modules import ModuleCache, ModuleFetcher, ModuleLoader
from .preferences import Preferences, fetch_preferences
from .reload import ReloadCoordinator, ReloadOutcome, ReloadRequest


class ClientOptions(msgspec.Struct, kw_only=True, rename="camel"):
    f_port: int
    e_port: int
    host: str = "localhost"

    @classmethod
    def parse(cls, options: ClientOptions | Mapping[str, Any]) -> ClientOptions:
        if isinstance(options, ClientOptions):
            return options

        return msgspec.convert(dict(options), type=cls, strict=False)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.f_port}"


class LiveUpdateClient:
    def __init__(
        self,
        options: ClientOptions,
        host_runtime: HostRuntime,
        channel: NotificationChannel,
        compilation: CompilationStateTracker,
        modules: ModuleCache,
        coordinator: ReloadCoordinator,
        env: Env | None = None,
        logger: Logger | None = None,
        fetcher: ModuleFetcher | None = None,
    ) -> None:
        self.options = options
        self.host_runtime = host_runtime
        self.channel = channel
        self.compilation = compilation
        self.modules = modules
        self.coordinator = coordinator
        self.env = env or Env()
        self.entry_module = self.env.HOTLINK_ENTRY_MODULE

        self._logger = logger or Logger()
        self._fetcher = fetcher
        self._logging_config = LoggingConfig()

        self._inbox: asyncio.Queue[bytes] = asyncio.Queue()
        self._dispatcher: asyncio.Task | None = None
        self._entry: asyncio.Task[types.ModuleType] | None = None
        self._tasks: set[asyncio.Task] = set()
        self._stopped = asyncio.Event()
        self._running = False

        self.preferences = Preferences()

        self.channel.on_data(self._inbox.put_nowait)
        self.channel.on_close(self._on_close)
        self.coordinator.on_enter(self._reenter)

    @classmethod
    def create(
        cls,
        global_object: Any,
        options: ClientOptions | Mapping[str, Any],
        env: Env | None = None,
        logger: Logger | None = None,
    ) -> LiveUpdateClient:
        options = ClientOptions.parse(options)
        env = env or load_env(Env)
        logger = logger or Logger()

        LoggingConfig().update(
            log_level=env.HOTLINK_LOG_LEVEL,
            log_output=env.HOTLINK_LOG_OUTPUT,
        )

        if global_object is None:
            global_object = types.SimpleNamespace()

        host_runtime = HostRuntime(
            global_object=global_object,
            restart=exec_restart if env.HOTLINK_NATIVE_RESTART else None,
            logger=logger,
        )

        channel = NotificationChannel(
            options.host,
            options.e_port,
            env=env,
            logger=logger,
            server_url=options.url,
        )

        compilation = CompilationStateTracker()
        fetcher = ModuleFetcher(options.url, env=env)
        modules = ModuleCache(
            fetcher,
            ModuleLoader(global_object),
            logger=logger,
        )

        coordinator = ReloadCoordinator(
            compilation,
            channel,
            modules,
            host_runtime,
            options.url,
            logger=logger,
            entry_module=env.HOTLINK_ENTRY_MODULE,
        )

        return cls(
            options,
            host_runtime,
            channel,
            compilation,
            modules,
            coordinator,
            env=env,
            logger=logger,
            fetcher=fetcher,
        )

    @property
    def url(self) -> str:
        return self.options.url

    @property
    def running(self) -> bool:
        return self._running

    async def start_app(self) -> types.ModuleType | None:
        """
        Connect and run the entry module. Returns the executed module, or
        None when a re-entry replaced it before it finished.
        """
        self.preferences = await fetch_preferences(
            self.options.host,
            self.options.f_port,
            timeout=self.env.preferences_timeout,
            logger=self._logger,
        )
        self.apply_preferences(self.preferences)

        self._running = True
        self._stopped.clear()
        if self._dispatcher is None or self._dispatcher.done():
            self._dispatcher = asyncio.create_task(self._dispatch())

        await self.channel.connect()

        entry = self.enter()

        try:
            return await asyncio.shield(entry)

        except asyncio.CancelledError:
            if entry.cancelled() and entry is not self._entry:
                return None

            raise

    def enter(self) -> asyncio.Task[types.ModuleType]:
        """
        Run the entry module in a task owned by the client. A previous entry
        still running is cancelled first.
        """
        previous = self._entry
        if previous is not None and not previous.done():
            previous.cancel()

        entry = asyncio.create_task(self.modules.require(self.entry_module))
        entry.add_done_callback(self._on_entry_done)
        self._entry = entry

        return entry

    async def _reenter(self):
        self.enter()

    def _on_entry_done(self, entry: asyncio.Task[types.ModuleType]):
        if entry.cancelled():
            return

        entry_error = entry.exception()
        if entry_error is not None:
            self._spawn(
                self._logger.log(
                    ClientError(
                        message=f"Entry module {self.entry_module} failed: {entry_error!r}",
                        host=self.options.host,
                        port=self.options.f_port,
                    )
                )
            )

    def apply_preferences(self, preferences: Preferences):
        if preferences.log_level:
            try:
                self._logging_config.update(log_level=preferences.log_level)

            except ValueError:
                self._spawn(
                    self._logger.log(
                        ClientWarning(
                            message=f"Ignoring unknown log level preference {preferences.log_level!r}",
                            host=self.options.host,
                            port=self.options.f_port,
                        )
                    )
                )

        self._logging_config.set_debug(
            preferences.debug_mode or self.env.HOTLINK_DEBUG_MODE
        )

    async def _dispatch(self):
        while True:
            frame = await self._inbox.get()

            try:
                await self.on_payload(frame)

            except Exception as dispatch_error:
                await self._logger.log(
                    ClientError(
                        message=f"Failed to handle channel payload: {dispatch_error!r}",
                        host=self.options.host,
                        port=self.options.e_port,
                    )
                )

            finally:
                self._inbox.task_done()

    async def drain(self):
        """Wait until every received frame has been handled."""
        await self._inbox.join()

    async def on_payload(self, frame: bytes):
        try:
            event = decode_event(frame)

        except MalformedEventError as malformed:
            await self._logger.log(
                ClientWarning(
                    message=f"Ignoring malformed payload: {malformed.reason}",
                    host=self.options.host,
                    port=self.options.e_port,
                )
            )
            return

        if event is None:
            await self._logger.log(
                ClientTrace(
                    message=f"Ignoring unknown event: {frame!r}",
                    host=self.options.host,
                    port=self.options.e_port,
                )
            )
            return

        await self._logger.log(
            ClientTrace(
                message=f"payload: {msgspec.json.encode(event).decode()}",
                host=self.options.host,
                port=self.options.e_port,
            )
        )

        match event:
            case CompilationStarted(token=token):
                self.compilation.started(token)

            case CompilationFinished(token=token):
                self.compilation.finished(token)

            case ReloadEvent():
                self.reload(ReloadRequest.from_event(event))

            case ReflectEvent(names=names):
                await self.coordinator.reflect(names)

            case DebugModeEvent(value=value):
                await self.set_debug_mode(value)

    def reload(self, request: ReloadRequest) -> asyncio.Task[ReloadOutcome]:
        timer = self.coordinator.accept(request)
        timer.add_done_callback(self._on_reload_done)

        return timer

    def _on_reload_done(self, timer: asyncio.Task[ReloadOutcome]):
        if timer.cancelled():
            return

        reload_error = timer.exception()
        if reload_error is not None:
            self._spawn(
                self._logger.log(
                    ClientError(
                        message=f"Reload failed: {reload_error!r}",
                        host=self.options.host,
                        port=self.options.f_port,
                    )
                )
            )

    async def set_debug_mode(self, enabled: bool):
        self._logging_config.set_debug(enabled)

        await self._logger.log(
            ClientInfo(
                message="DEBUG MODE STARTED" if enabled else "DEBUG MODE STOPPED",
                host=self.options.host,
                port=self.options.e_port,
            )
        )

    async def forward_log(self, message: str, level: LogLevel = LogLevel.INFO):
        """Send an application log line to the development machine."""
        await self.channel.send(
            {
                "event": "log",
                "level": level.value,
                "message": message,
            }
        )

    def _on_close(self):
        self._spawn(
            self.host_runtime.notify(
                "Notification server is terminated.\n"
                f"(This notice closes in {self.env.notice_duration:g}s.)",
                duration=self.env.notice_duration,
            )
        )

    def _spawn(self, coroutine: Coroutine[Any, Any, None]):
        task = asyncio.ensure_future(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self):
        await self._stopped.wait()

    async def stop(self):
        self._running = False

        self.coordinator.cancel_pending()
        self.channel.end()
        self.host_runtime.cancel_notices()

        entry, self._entry = self._entry, None
        if entry is not None and not entry.done():
            entry.cancel()
            await asyncio.gather(entry, return_exceptions=True)

        if self._dispatcher is not None and not self._dispatcher.done():
            self._dispatcher.cancel()
            try:
                await self._dispatcher

            except asyncio.CancelledError:
                pass

        self._dispatcher = None

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        if self._fetcher is not None:
            await self._fetcher.close()

        await self._logger.log(
            ClientDebug(
                message="Live update client stopped",
                host=self.options.host,
                port=self.options.f_port,
            )
        )

        self._stopped.set()


async def run(
    global_object: Any,
    options: ClientOptions | Mapping[str, Any],
    env: Env | None = None,
) -> LiveUpdateClient:
    client = LiveUpdateClient.create(global_object, options, env=env)

    try:
        await client.start_app()

    except BaseException:
        await client.stop()
        raise

    return client


def launch(
    global_object: Any,
    options: ClientOptions | Mapping[str, Any],
    env: Env | None = None,
):
    """Run the client until it is stopped. Blocks the calling thread."""

    async def serve():
        client = await run(global_object, options, env=env)
        await client.wait()

    asyncio.run(serve())
