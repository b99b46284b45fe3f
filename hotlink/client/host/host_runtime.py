"""
Boundary between hotlink and the application's host runtime.

The host decides whether a native restart primitive exists and how a
transient notice is shown to the user. Both are optional: without a
restart primitive the reload coordinator re-enters the application in
process, and without a notice hook the notice is only logged.
"""

import asyncio
import os
import sys
import types
from typing import Any, Callable

from hotlink.logging import Logger
from hotlink.logging.hotlink_logging_models import ClientInfo

RestartPrimitive = Callable[[], bool | None]
NoticeHook = Callable[[str], Callable[[], None] | None]


def exec_restart() -> bool:
    """Replace the current process with a fresh interpreter running the same argv."""
    sys.stdout.flush()
    sys.stderr.flush()
    os.execv(sys.executable, [sys.executable, *sys.argv])
    return True


class HostRuntime:
    def __init__(
        self,
        global_object: Any = None,
        restart: RestartPrimitive | None = None,
        show_notice: NoticeHook | None = None,
        logger: Logger | None = None,
    ) -> None:
        if global_object is None:
            global_object = types.SimpleNamespace()

        self.global_object = global_object
        self._restart = restart
        self._show_notice = show_notice
        self._logger = logger or Logger()
        self._notice_tasks: set[asyncio.Task] = set()

    @property
    def supports_restart(self) -> bool:
        return self._restart is not None

    def restart(self) -> bool:
        """
        Run the native restart primitive. Returns False when the host has
        none or the primitive reports it could not restart.
        """
        if self._restart is None:
            return False

        return self._restart() is not False

    async def notify(self, message: str, duration: float = 3.0):
        await self._logger.log(
            ClientInfo(
                message=message,
                host="app",
                port=0,
            )
        )

        if self._show_notice is None:
            return

        dismiss = self._show_notice(message)
        if dismiss is None:
            return

        task = asyncio.create_task(self._dismiss_later(dismiss, duration))
        self._notice_tasks.add(task)
        task.add_done_callback(self._notice_tasks.discard)

    async def _dismiss_later(self, dismiss: Callable[[], None], duration: float):
        await asyncio.sleep(duration)
        dismiss()

    def cancel_notices(self):
        for task in list(self._notice_tasks):
            task.cancel()

        self._notice_tasks.clear()
