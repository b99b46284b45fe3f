from __future__ import annotations

from dataclasses import dataclass

from hotlink.client.events import ReloadEvent


@dataclass(slots=True, frozen=True)
class ReloadRequest:
    """A reload asked for by the development machine. ``timer`` is in seconds."""

    timer: float = 0.0
    force: bool = False

    @classmethod
    def from_event(cls, event: ReloadEvent) -> ReloadRequest:
        return cls(
            timer=max(0.0, float(event.timer)) / 1000.0,
            force=bool(event.force),
        )
