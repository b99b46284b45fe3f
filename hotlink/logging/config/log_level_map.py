from hotlink.logging.models import LogLevel


class LogLevelMap:
    """Severity rank of each level, TRACE lowest."""

    def __init__(self) -> None:
        self._ranks: dict[LogLevel, int] = {
            level: rank for rank, level in enumerate(LogLevel)
        }

    def __getitem__(self, level: LogLevel) -> int:
        return self._ranks[level]

    def allows(self, level: LogLevel, threshold: LogLevel) -> bool:
        return self._ranks[level] >= self._ranks[threshold]

    def quieter_than(self, level: LogLevel, other: LogLevel) -> bool:
        return self._ranks[level] > self._ranks[other]
