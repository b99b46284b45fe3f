import asyncio

import aiohttp

from hotlink.env import Env

from .errors import ModuleFetchError


def module_path(name: str) -> str:
    """Map a dotted module name to the URL path serving its source."""
    return "/" + "/".join(name.split(".")) + ".py"


class ModuleFetcher:
    def __init__(
        self,
        base_url: str,
        env: Env | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._env = env or Env()
        self._session = session
        self._owns_session = session is None
        self.fetch_count = 0

    def url_for(self, name: str) -> str:
        return self.base_url + module_path(name)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._env.fetch_timeout),
            )
            self._owns_session = True

        return self._session

    async def fetch(self, name: str) -> str:
        url = self.url_for(name)
        self.fetch_count += 1

        try:
            async with self._get_session().get(url) as response:
                if response.status != 200:
                    raise ModuleFetchError(
                        f"No module named '{name}' (GET {url} returned {response.status})",
                        name=name,
                        url=url,
                        status=response.status,
                    )

                return await response.text()

        except (aiohttp.ClientError, asyncio.TimeoutError) as fetch_error:
            raise ModuleFetchError(
                f"No module named '{name}' (GET {url} failed: {fetch_error!r})",
                name=name,
                url=url,
            ) from fetch_error

    async def close(self):
        if self._owns_session and self._session is not None:
            await self._session.close()

        self._session = None
