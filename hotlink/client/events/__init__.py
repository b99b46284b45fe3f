from .channel_events import (
    ChannelEvent as ChannelEvent,
    CompilationFinished as CompilationFinished,
    CompilationStarted as CompilationStarted,
    DebugModeEvent as DebugModeEvent,
    ReflectEvent as ReflectEvent,
    ReloadEvent as ReloadEvent,
)
from .decode import (
    MalformedEventError as MalformedEventError,
    decode_event as decode_event,
)
