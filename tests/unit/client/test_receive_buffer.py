"""
Tests for newline frame extraction.
"""

from hotlink.client.channel import ReceiveBuffer


class TestReceiveBuffer:
    def test_single_frame(self):
        buffer = ReceiveBuffer()
        buffer += b'{"event": "reload"}\n'

        assert buffer.maybe_extract_next() == b'{"event": "reload"}'
        assert buffer.maybe_extract_next() is None
        assert len(buffer) == 0

    def test_partial_frame_waits_for_terminator(self):
        """A frame split across reads is only returned once complete."""
        buffer = ReceiveBuffer()
        buffer += b'{"event": "rel'

        assert buffer.maybe_extract_next() is None

        buffer += b'oad"}\n'

        assert buffer.maybe_extract_next() == b'{"event": "reload"}'

    def test_several_frames_in_one_read(self):
        buffer = ReceiveBuffer()
        buffer += b"one\ntwo\r\nthree"

        assert buffer.maybe_extract_next() == b"one"
        assert buffer.maybe_extract_next() == b"two"
        assert buffer.maybe_extract_next() is None
        assert bytes(buffer) == b"three"

    def test_blank_lines_skipped(self):
        buffer = ReceiveBuffer()
        buffer += b"\n\n  \nframe\n"

        assert buffer.maybe_extract_next() == b"frame"

    def test_clear(self):
        buffer = ReceiveBuffer()
        buffer += b"leftover"

        buffer.clear()

        assert not buffer
