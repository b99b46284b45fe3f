from .errors import ChannelNotConnectedError as ChannelNotConnectedError
from .notification_channel import NotificationChannel as NotificationChannel
from .receive_buffer import ReceiveBuffer as ReceiveBuffer
from .reconnect import (
    ReconnectPolicy as ReconnectPolicy,
    ReconnectScheduler as ReconnectScheduler,
)
from .socket_error_code import SocketErrorCode as SocketErrorCode
