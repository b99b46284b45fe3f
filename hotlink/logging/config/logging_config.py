from typing import List, Literal

from hotlink.logging.models import LogLevel, LogLevelName

from .log_level_map import LogLevelMap
from .stream_type import StreamType

LogOutput = Literal["stdout", "stderr"]


class _GlobalLoggingState:
    # Shared by every LoggingConfig. Channel events toggle the level from
    # inside handler tasks, so this cannot live in a ContextVar.
    log_level: LogLevel = LogLevel.INFO
    configured_level: LogLevel = LogLevel.INFO
    output: StreamType = StreamType.STDERR
    disabled_loggers: List[str] = []
    level_map = LogLevelMap()


class LoggingConfig:
    def __init__(self) -> None:
        self._state = _GlobalLoggingState
        self._level_map = self._state.level_map

    def update(
        self,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
        disabled_loggers: List[str] | None = None,
    ):
        if log_level:
            level = LogLevel.to_level(log_level)
            self._state.log_level = level
            self._state.configured_level = level

        if log_output:
            self._state.output = (
                StreamType.STDOUT if log_output == "stdout" else StreamType.STDERR
            )

        if disabled_loggers is not None:
            self._state.disabled_loggers = list(disabled_loggers)

    def set_debug(self, enabled: bool):
        """Temporarily lower the level to DEBUG, or restore the configured level."""
        configured = self._state.configured_level
        if enabled and self._level_map.quieter_than(configured, LogLevel.DEBUG):
            self._state.log_level = LogLevel.DEBUG

        else:
            self._state.log_level = configured

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        return logger_name not in self._state.disabled_loggers and (
            self._level_map.allows(log_level, self._state.log_level)
        )

    @property
    def level(self):
        return self._state.log_level

    @property
    def debug(self) -> bool:
        return self._level_map.allows(LogLevel.DEBUG, self._state.log_level)

    @property
    def output(self):
        return self._state.output
