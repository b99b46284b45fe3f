from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class HookResult:
    name: str
    ok: bool = True
    value: Any = None
    error: BaseException | None = None
