"""
Events pushed by the development machine over the notification channel.

Every frame is a JSON object discriminated by its ``event`` field.
"""

from typing import Union

import msgspec


class ChannelEnvelope(msgspec.Struct):
    event: str


class CompilationStarted(msgspec.Struct, tag_field="event", tag="alloy-compilation"):
    token: str | int


class CompilationFinished(
    msgspec.Struct,
    tag_field="event",
    tag="alloy-compilation-done",
):
    token: str | int


class ReloadEvent(msgspec.Struct, tag_field="event", tag="reload"):
    timer: int | float = 0
    force: bool = False


class ReflectEvent(msgspec.Struct, tag_field="event", tag="reflect"):
    names: list[str] = msgspec.field(default_factory=list)


class DebugModeEvent(msgspec.Struct, tag_field="event", tag="debug-mode"):
    value: bool = True


ChannelEvent = Union[
    CompilationStarted,
    CompilationFinished,
    ReloadEvent,
    ReflectEvent,
    DebugModeEvent,
]

EVENT_TYPES: dict[str, type[ChannelEvent]] = {
    event_type.__struct_config__.tag: event_type
    for event_type in (
        CompilationStarted,
        CompilationFinished,
        ReloadEvent,
        ReflectEvent,
        DebugModeEvent,
    )
}
