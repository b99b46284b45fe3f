"""
Resolves request URLs to response payloads for the content server.

    /                  dashboard index, re-read on every request
    /main.bundle.js    dashboard bundle, read once per process
    /app.py            entry module, passed through EntryModuleTransformer
    anything else      project resource file, or 404
"""

import asyncio
import pathlib

from hotlink.client.modules import module_path
from hotlink.constants import (
    DASHBOARD_BUNDLE,
    DASHBOARD_BUNDLE_PATH,
    DASHBOARD_INDEX,
    DEFAULT_ENTRY_MODULE,
)
from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import ServerDebug, ServerWarning

from .entry_module_transformer import EntryModuleTransformer
from .resource_loader import ResourceLoader
from .response_info import ResponseInfo

DEFAULT_DASHBOARD_DIRECTORY = pathlib.Path(__file__).resolve().parent.parent / "web"


class ContentResponder:
    def __init__(
        self,
        dashboard_directory: str | pathlib.Path | None = None,
        resources_directory: str = "Resources",
        entry_module: str = DEFAULT_ENTRY_MODULE,
        logger: Logger | None = None,
    ) -> None:
        self.dashboard_directory = pathlib.Path(
            dashboard_directory or DEFAULT_DASHBOARD_DIRECTORY
        )
        self.resources_directory = resources_directory
        self.entry_path = module_path(entry_module)

        self._logger = logger or Logger()
        self._caches: dict[str, ResponseInfo] = {}

    def has_cache(self, key: str) -> bool:
        return key in self._caches

    def cache(self, key: str, response: ResponseInfo) -> ResponseInfo:
        self._caches[key] = response
        return response

    def clear_caches(self):
        self._caches.clear()

    async def respond(
        self,
        url: str,
        project_dir: str,
        platform: str | None = None,
    ) -> ResponseInfo:
        """Never raises: any failure to produce content becomes a 404."""
        path = url.split("?", 1)[0]

        try:
            if path == "/":
                return await self.web_ui()

            elif path == DASHBOARD_BUNDLE_PATH:
                return await self.web_js()

            return await self.resource(url, project_dir, platform)

        except (OSError, ValueError) as read_error:
            await self._logger.log(
                ServerWarning(
                    message=f"Failed to read content for {url}: {read_error}",
                    host="",
                    port=0,
                    project_dir=project_dir,
                )
            )

            return self.not_found(url)

    def not_found(self, url: str) -> ResponseInfo:
        return ResponseInfo(
            f"404 not found: {url}",
            content_type="text/plain",
            status_code=404,
        )

    async def web_ui(self) -> ResponseInfo:
        content = await self._read_file(self.dashboard_directory / DASHBOARD_INDEX)

        return ResponseInfo(content, content_type="text/html")

    async def web_js(self) -> ResponseInfo:
        cached = self._caches.get(DASHBOARD_BUNDLE)
        if cached is not None:
            return cached

        content = await self._read_file(self.dashboard_directory / DASHBOARD_BUNDLE)

        return self.cache(
            DASHBOARD_BUNDLE,
            ResponseInfo(content, content_type="text/javascript"),
        )

    async def resource(
        self,
        url: str,
        project_dir: str,
        platform: str | None = None,
    ) -> ResponseInfo:
        loader = ResourceLoader(
            url,
            project_dir,
            platform=platform,
            resources_directory=self.resources_directory,
        )

        loop = asyncio.get_running_loop()
        content = await loop.run_in_executor(None, lambda: loader.content)
        if content is None:
            return self.not_found(url)

        if loader.relative_path == self.entry_path.lstrip("/"):
            content = await self.transform_entry(content, url, project_dir)

        return ResponseInfo(content)

    async def transform_entry(self, content: bytes, url: str, project_dir: str) -> bytes:
        try:
            converted = EntryModuleTransformer(
                content.decode(),
                filename=self.entry_path.lstrip("/"),
            ).convert()

        except (SyntaxError, UnicodeDecodeError) as transform_error:
            # The client surfaces the same error when it executes the module.
            await self._logger.log(
                ServerWarning(
                    message=f"Serving {url} untransformed: {transform_error}",
                    host="",
                    port=0,
                    project_dir=project_dir,
                )
            )

            return content

        await self._logger.log(
            ServerDebug(
                message=f"Transformed entry module {url}",
                host="",
                port=0,
                project_dir=project_dir,
            )
        )

        return converted.encode()

    async def _read_file(self, path: pathlib.Path) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, path.read_bytes)
