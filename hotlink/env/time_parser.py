import re
from datetime import timedelta


class TimeParser:
    def __init__(self) -> None:
        self._units = {
            "ms": "milliseconds",
            "s": "seconds",
            "m": "minutes",
            "h": "hours",
        }
        self._pattern = re.compile(
            r"(?P<val>\d+(\.\d+)?)(?P<unit>ms|[smh])?",
            flags=re.I,
        )

    def parse(self, time_amount: str) -> float:
        """
        Parse durations like ``"10s"``, ``"250ms"`` or ``"1h30m"`` into
        seconds. A bare number is seconds. Raises ValueError for anything
        else.
        """
        amount = time_amount.strip()
        durations: dict[str, float] = {}
        position = 0

        for match in self._pattern.finditer(amount):
            if match.start() != position:
                break

            unit = self._units[(match.group("unit") or "s").lower()]
            durations[unit] = durations.get(unit, 0.0) + float(match.group("val"))
            position = match.end()

        if not amount or position != len(amount):
            raise ValueError(f"Invalid duration {time_amount!r}")

        return timedelta(**durations).total_seconds()
