import asyncio

import aiohttp
import msgspec

from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import ClientDebug, ClientWarning


class Preferences(msgspec.Struct, kw_only=True):
    debug_mode: bool = False
    log_level: str | None = None


async def fetch_preferences(
    host: str,
    port: int,
    timeout: float = 2.0,
    logger: Logger | None = None,
    session: aiohttp.ClientSession | None = None,
) -> Preferences:
    """
    Fetch ``/prefs`` from the development machine. Never raises: network,
    status and decode failures are logged and the defaults are returned.
    """
    logger = logger or Logger()
    url = f"http://{host}:{port}/prefs"

    owns_session = session is None
    if session is None:
        session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout),
        )

    try:
        async with session.get(url) as response:
            if response.status != 200:
                raise aiohttp.ClientResponseError(
                    response.request_info,
                    response.history,
                    status=response.status,
                    message=f"GET {url} returned {response.status}",
                )

            body = await response.read()

        preferences = msgspec.json.decode(body, type=Preferences)

        await logger.log(
            ClientDebug(
                message=f"Loaded preferences from {url}",
                host=host,
                port=port,
            )
        )

        return preferences

    except (
        aiohttp.ClientError,
        asyncio.TimeoutError,
        msgspec.DecodeError,
        msgspec.ValidationError,
    ) as preferences_error:
        await logger.log(
            ClientWarning(
                message=f"Failed to load preferences from {url}, using defaults: {preferences_error}",
                host=host,
                port=port,
            )
        )

        return Preferences()

    finally:
        if owns_session:
            await session.close()
