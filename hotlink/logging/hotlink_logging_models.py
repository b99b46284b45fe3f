from .models import Entry, LogLevel


class ClientTrace(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.TRACE


class ClientDebug(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.DEBUG


class ClientInfo(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.INFO


class ClientWarning(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.WARN


class ClientError(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.ERROR


class ServerTrace(Entry, kw_only=True):
    host: str
    port: int
    project_dir: str
    level: LogLevel = LogLevel.TRACE


class ServerDebug(Entry, kw_only=True):
    host: str
    port: int
    project_dir: str
    level: LogLevel = LogLevel.DEBUG


class ServerInfo(Entry, kw_only=True):
    host: str
    port: int
    project_dir: str
    level: LogLevel = LogLevel.INFO


class ServerWarning(Entry, kw_only=True):
    host: str
    port: int
    project_dir: str
    level: LogLevel = LogLevel.WARN


class ServerError(Entry, kw_only=True):
    host: str
    port: int
    project_dir: str
    level: LogLevel = LogLevel.ERROR
