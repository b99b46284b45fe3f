"""
In-app cache of application modules fetched from the development machine.

Modules are pulled lazily: ``require`` fetches a module the first time it
is asked for and serves every later call from the cache, so the server
never needs to know the dependency graph. The reload coordinator
invalidates single entries (``clear_cache``) or everything
(``clear_all_caches``) to force a re-fetch.
"""

import asyncio
import types
from dataclasses import dataclass
from typing import Protocol

from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import ClientDebug

from .module_loader import ModuleLoader


class Fetcher(Protocol):
    async def fetch(self, name: str) -> str: ...


@dataclass(slots=True)
class ModuleCacheEntry:
    name: str
    source: str
    module: types.ModuleType


class ModuleCache:
    def __init__(
        self,
        fetcher: Fetcher,
        loader: ModuleLoader,
        logger: Logger | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._loader = loader
        self._logger = logger or Logger()
        self._entries: dict[str, ModuleCacheEntry] = {}
        self._loading: dict[str, asyncio.Future[types.ModuleType]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    async def require(self, name: str) -> types.ModuleType:
        """
        Return the executed module for ``name``, fetching and executing it
        on a cache miss. Fetch and execution errors propagate.

        The first caller runs the load in its own task, so cancelling that
        caller stops the module. Concurrent callers wait on the same load.
        """
        entry = self._entries.get(name)
        if entry is not None:
            return entry.module

        loading = self._loading.get(name)
        if loading is not None:
            return await asyncio.shield(loading)

        loading = asyncio.get_running_loop().create_future()
        self._loading[name] = loading

        try:
            module = await self._load(name, loading)

        except Exception as load_error:
            loading.set_exception(load_error)
            # Marks the error retrieved when nobody else was waiting.
            loading.exception()
            raise

        except BaseException:
            loading.cancel()
            raise

        finally:
            if self._loading.get(name) is loading:
                del self._loading[name]

        loading.set_result(module)

        return module

    async def _load(
        self,
        name: str,
        loading: asyncio.Future[types.ModuleType],
    ) -> types.ModuleType:
        await self._logger.log(
            ClientDebug(
                message=f"Fetching module {name}",
                host="app",
                port=0,
            )
        )

        source = await self._fetcher.fetch(name)
        module = self._loader.create(name)

        entry = ModuleCacheEntry(
            name=name,
            source=source,
            module=module,
        )

        # Stored before execution so circular requires resolve to the
        # partially initialised module instead of fetching again. A load
        # invalidated mid-fetch runs uncached.
        if self._loading.get(name) is loading:
            self._entries[name] = entry

        try:
            await self._loader.execute(module, source, self.require)

        except BaseException:
            if self._entries.get(name) is entry:
                del self._entries[name]

            raise

        return module

    def clear_cache(self, name: str) -> bool:
        """
        Forget ``name`` so the next ``require`` fetches it again. A load
        still running is left to finish for whoever is awaiting it.
        """
        self._loading.pop(name, None)
        return self._entries.pop(name, None) is not None

    def clear_all_caches(self):
        self._entries.clear()
        self._loading.clear()
