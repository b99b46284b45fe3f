import time
from typing import Awaitable, Callable

from aiohttp import web

from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import (
    ServerDebug,
    ServerError,
    ServerInfo,
)
from hotlink.server.responder import (
    ContentResponder,
    PreferencesResponder,
    ResponseInfo,
)

ReloadTrigger = Callable[[], Awaitable[None]]


class ContentServer:
    """
    HTTP side of the development machine: serves module sources, project
    resources, the dashboard and preferences to the running app.
    """

    def __init__(
        self,
        host: str,
        port: int,
        project_dir: str,
        platform: str | None = None,
        responder: ContentResponder | None = None,
        preferences: PreferencesResponder | None = None,
        on_reload: ReloadTrigger | None = None,
        logger: Logger | None = None,
        bind_host: str = "0.0.0.0",
    ) -> None:
        self.host = host
        self.port = port
        self.bind_host = bind_host
        self.project_dir = project_dir
        self.platform = platform

        self._logger = logger or Logger()
        self._responder = responder or ContentResponder(logger=self._logger)
        self._preferences = preferences or PreferencesResponder()
        self._on_reload = on_reload

        self.app = web.Application(middlewares=[self._request_logging_middleware])
        self._runner: web.AppRunner | None = None
        self._setup_routes()

    @property
    def running(self) -> bool:
        return self._runner is not None

    def _setup_routes(self):
        router = self.app.router
        router.add_get("/prefs", self._handle_preferences)
        router.add_post("/reload", self._handle_reload)
        router.add_get("/{tail:.*}", self._handle_content)

    @web.middleware
    async def _request_logging_middleware(
        self,
        request: web.Request,
        handler,
    ) -> web.StreamResponse:
        start = time.monotonic()

        try:
            response = await handler(request)

        except web.HTTPException:
            raise

        except Exception as request_error:
            await self._logger.log(
                ServerError(
                    message=f"{request.method} {request.path_qs} failed: {request_error!r}",
                    host=self.host,
                    port=self.port,
                    project_dir=self.project_dir,
                )
            )
            raise

        elapsed_ms = (time.monotonic() - start) * 1000
        await self._logger.log(
            ServerDebug(
                message=f"{request.method} {request.path_qs} {response.status} ({elapsed_ms:.1f}ms)",
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

        return response

    def _to_response(self, info: ResponseInfo) -> web.Response:
        return web.Response(
            body=info.body,
            status=info.status_code,
            content_type=info.content_type,
        )

    async def _handle_preferences(self, request: web.Request) -> web.Response:
        return self._to_response(self._preferences.respond())

    async def _handle_reload(self, request: web.Request) -> web.Response:
        if self._on_reload is None:
            return web.Response(status=503, text="reload is not available")

        await self._on_reload()

        return web.Response(status=202, text="reload requested")

    async def _handle_content(self, request: web.Request) -> web.Response:
        info = await self._responder.respond(
            request.path_qs,
            self.project_dir,
            self.platform,
        )

        return self._to_response(info)

    async def start(self):
        if self._runner is not None:
            return

        runner = web.AppRunner(self.app)
        await runner.setup()

        site = web.TCPSite(runner, self.bind_host, self.port)
        await site.start()

        self._runner = runner

        await self._logger.log(
            ServerInfo(
                message=f"Content server listening on http://{self.host}:{self.port}",
                host=self.host,
                port=self.port,
                project_dir=self.project_dir,
            )
        )

    async def stop(self):
        if self._runner is None:
            return

        await self._runner.cleanup()
        self._runner = None
