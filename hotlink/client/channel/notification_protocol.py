from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from .receive_buffer import ReceiveBuffer

if TYPE_CHECKING:
    from .notification_channel import NotificationChannel


class NotificationProtocol(asyncio.Protocol):
    def __init__(self, channel: NotificationChannel) -> None:
        super().__init__()
        self.channel = channel
        self.transport: asyncio.Transport | None = None
        self._receive_buffer = ReceiveBuffer()

    def connection_made(self, transport: asyncio.Transport):
        self.transport = transport
        self.channel.connection_made(self, transport)

    def data_received(self, data: bytes) -> None:
        self._receive_buffer += data

        while (frame := self._receive_buffer.maybe_extract_next()) is not None:
            self.channel.frame_received(self, frame)

    def eof_received(self) -> bool | None:
        # Let the transport close itself; connection_lost follows.
        return None

    def connection_lost(self, exc: Exception | None) -> None:
        self._receive_buffer.clear()
        self.channel.connection_lost(self, exc)
