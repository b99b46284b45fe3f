from .notification_server import NotificationServer as NotificationServer
from .notification_server_protocol import (
    NotificationServerProtocol as NotificationServerProtocol,
)
