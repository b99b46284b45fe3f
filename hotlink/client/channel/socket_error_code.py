from __future__ import annotations

import errno
from enum import Enum


class SocketErrorCode(Enum):
    NETWORK_UNREACHABLE = "network-unreachable"
    NOT_CONNECTED = "not-connected"
    CONNECTION_REFUSED = "connection-refused"
    OTHER = "other"

    @classmethod
    def from_errno(cls, error_number: int | None) -> SocketErrorCode:
        codes = {
            errno.ENETUNREACH: cls.NETWORK_UNREACHABLE,
            errno.ENETDOWN: cls.NETWORK_UNREACHABLE,
            errno.EHOSTUNREACH: cls.NETWORK_UNREACHABLE,
            errno.ENOTCONN: cls.NOT_CONNECTED,
            errno.ECONNREFUSED: cls.CONNECTION_REFUSED,
        }

        return codes.get(error_number, cls.OTHER)

    @classmethod
    def from_error(cls, error: BaseException) -> SocketErrorCode:
        if isinstance(error, ConnectionRefusedError):
            return cls.CONNECTION_REFUSED

        if isinstance(error, OSError):
            return cls.from_errno(error.errno)

        return cls.OTHER
