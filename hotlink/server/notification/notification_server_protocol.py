from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from hotlink.client.channel import ReceiveBuffer

if TYPE_CHECKING:
    from .notification_server import NotificationServer


class NotificationServerProtocol(asyncio.Protocol):
    def __init__(self, server: NotificationServer) -> None:
        super().__init__()
        self.server = server
        self.transport: asyncio.Transport | None = None
        self._receive_buffer = ReceiveBuffer()

    @property
    def peer(self) -> str:
        if self.transport is None:
            return "unknown"

        peername = self.transport.get_extra_info("peername")
        if not peername:
            return "unknown"

        return f"{peername[0]}:{peername[1]}"

    def connection_made(self, transport: asyncio.Transport):
        self.transport = transport
        self.server.client_connected(self)

    def data_received(self, data: bytes) -> None:
        self._receive_buffer += data

        while (frame := self._receive_buffer.maybe_extract_next()) is not None:
            self.server.frame_received(self, frame)

    def connection_lost(self, exc: Exception | None) -> None:
        self._receive_buffer.clear()
        self.server.client_disconnected(self, exc)
        self.transport = None

    def write(self, frame: bytes) -> bool:
        if self.transport is None or self.transport.is_closing():
            return False

        self.transport.write(frame)
        return True
