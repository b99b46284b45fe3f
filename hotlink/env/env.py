from __future__ import annotations

from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictBool, StrictInt, StrictStr

from .time_parser import TimeParser

PrimaryType = Union[str, int, float, bytes, bool]


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Env(BaseModel):
    HOTLINK_BASE_PORT: StrictInt = 4157
    HOTLINK_HOST: StrictStr | None = None
    HOTLINK_RECONNECT_DELAY: StrictStr = "10s"
    HOTLINK_RECONNECT_FAST_DELAY: StrictStr = "1s"
    HOTLINK_NOTICE_DURATION: StrictStr = "3s"
    HOTLINK_PREFERENCES_TIMEOUT: StrictStr = "2s"
    HOTLINK_FETCH_TIMEOUT: StrictStr = "30s"
    HOTLINK_ENTRY_MODULE: StrictStr = "app"
    HOTLINK_RESOURCES_DIRECTORY: StrictStr = "Resources"
    HOTLINK_DASHBOARD_DIRECTORY: StrictStr | None = None
    HOTLINK_LOG_LEVEL: Literal[
        "trace", "debug", "info", "warn", "error", "critical", "fatal"
    ] = "info"
    HOTLINK_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    HOTLINK_DEBUG_MODE: StrictBool = False
    HOTLINK_NATIVE_RESTART: StrictBool = False

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "HOTLINK_BASE_PORT": int,
            "HOTLINK_HOST": str,
            "HOTLINK_RECONNECT_DELAY": str,
            "HOTLINK_RECONNECT_FAST_DELAY": str,
            "HOTLINK_NOTICE_DURATION": str,
            "HOTLINK_PREFERENCES_TIMEOUT": str,
            "HOTLINK_FETCH_TIMEOUT": str,
            "HOTLINK_ENTRY_MODULE": str,
            "HOTLINK_RESOURCES_DIRECTORY": str,
            "HOTLINK_DASHBOARD_DIRECTORY": str,
            "HOTLINK_LOG_LEVEL": str,
            "HOTLINK_LOG_OUTPUT": str,
            "HOTLINK_DEBUG_MODE": parse_bool,
            "HOTLINK_NATIVE_RESTART": parse_bool,
        }

    def seconds(self, value: str) -> float:
        return TimeParser().parse(value)

    def get_reconnect_delays(self) -> dict[str, float]:
        """Reconnect backoff, in seconds, keyed by delay class."""
        return {
            "default": self.seconds(self.HOTLINK_RECONNECT_DELAY),
            "fast": self.seconds(self.HOTLINK_RECONNECT_FAST_DELAY),
        }

    @property
    def notice_duration(self) -> float:
        return self.seconds(self.HOTLINK_NOTICE_DURATION)

    @property
    def preferences_timeout(self) -> float:
        return self.seconds(self.HOTLINK_PREFERENCES_TIMEOUT)

    @property
    def fetch_timeout(self) -> float:
        return self.seconds(self.HOTLINK_FETCH_TIMEOUT)
