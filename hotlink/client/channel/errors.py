class ChannelNotConnectedError(ConnectionError):
    pass
