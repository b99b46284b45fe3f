from __future__ import annotations


class ReceiveBuffer:
    """Accumulates stream data and yields newline-delimited frames."""

    def __init__(self) -> None:
        self.buffer = bytearray()
        self._next_line_search = 0

    def __iadd__(self, byteslike: bytes | bytearray) -> ReceiveBuffer:
        self.buffer += byteslike
        return self

    def __bool__(self) -> bool:
        return bool(len(self))

    def __len__(self) -> int:
        return len(self.buffer)

    def __bytes__(self) -> bytes:
        return bytes(self.buffer)

    def maybe_extract_next(self) -> bytes | None:
        """
        Extract the first complete frame, without its terminator.
        Blank lines are skipped.
        """
        while True:
            idx = self.buffer.find(b"\n", self._next_line_search)

            if idx == -1:
                self._next_line_search = len(self.buffer)
                return None

            out = bytes(self.buffer[:idx]).rstrip(b"\r")
            del self.buffer[: idx + 1]
            self._next_line_search = 0

            if out.strip():
                return out

    def clear(self):
        self.buffer.clear()
        self._next_line_search = 0
