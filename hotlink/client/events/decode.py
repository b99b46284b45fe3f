import msgspec

from .channel_events import EVENT_TYPES, ChannelEnvelope, ChannelEvent


class MalformedEventError(ValueError):
    def __init__(self, frame: bytes, reason: str) -> None:
        super().__init__(f"Malformed channel payload ({reason}): {frame[:200]!r}")
        self.frame = frame
        self.reason = reason


def decode_event(frame: bytes | str) -> ChannelEvent | None:
    """
    Decode one channel frame.

    Returns None for a well-formed frame whose ``event`` is not recognised.
    Raises MalformedEventError for invalid JSON, a missing ``event`` field,
    or fields of the wrong type.
    """
    if isinstance(frame, str):
        frame = frame.encode()

    try:
        envelope = msgspec.json.decode(frame, type=ChannelEnvelope)

    except (msgspec.DecodeError, msgspec.ValidationError) as decode_error:
        raise MalformedEventError(frame, str(decode_error)) from decode_error

    event_type = EVENT_TYPES.get(envelope.event)
    if event_type is None:
        return None

    try:
        return msgspec.json.decode(frame, type=event_type)

    except msgspec.ValidationError as validation_error:
        raise MalformedEventError(frame, str(validation_error)) from validation_error
