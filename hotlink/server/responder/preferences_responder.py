import orjson

from .response_info import ResponseInfo


class PreferencesResponder:
    """Serves ``/prefs``, the settings the app reads once at startup."""

    def __init__(
        self,
        debug_mode: bool = False,
        log_level: str | None = None,
    ) -> None:
        self.debug_mode = debug_mode
        self.log_level = log_level

    def to_dict(self) -> dict[str, bool | str | None]:
        return {
            "debug_mode": self.debug_mode,
            "log_level": self.log_level,
        }

    def respond(self) -> ResponseInfo:
        return ResponseInfo(
            orjson.dumps(self.to_dict()),
            content_type="application/json",
        )
