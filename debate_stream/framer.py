"""Reassembly of SSE ``data:`` frames from an arbitrarily chunked stream."""

import codecs
import logging

from .models import Frame

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
FIELD_SEPARATOR = " "


class StreamFramer:
    """Turns raw chunks into complete, newline-delimited frames.

    The last line of each chunk may be incomplete, so it is carried over
    until the next ``feed`` (or ``finish``) completes it. Bytes are decoded
    incrementally, so a chunk that ends in the middle of a multi-byte
    character is completed by the following one.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes | str) -> list[Frame]:
        """Consume one chunk and return every frame it completes."""
        if isinstance(chunk, bytes):
            text = self._decoder.decode(chunk)
        else:
            text = chunk
        self._buffer += text

        frames: list[Frame] = []
        while True:
            line_end = self._buffer.find("\n")
            if line_end == -1:
                break

            line = self._buffer[:line_end]
            self._buffer = self._buffer[line_end + 1 :]

            frame = self._parse_line(line)
            if frame is not None:
                frames.append(frame)

        return frames

    def finish(self) -> list[Frame]:
        """Flush buffered content at end of stream.

        A trailing line without a newline is treated as complete. The
        framer is reset afterwards and can be reused for another stream.
        """
        self._buffer += self._decoder.decode(b"", final=True)
        remainder = self._buffer
        self._buffer = ""
        self._decoder.reset()

        if not remainder:
            return []

        frame = self._parse_line(remainder)
        return [frame] if frame is not None else []

    @property
    def pending(self) -> str:
        """Text held back waiting for a line terminator."""
        return self._buffer

    @staticmethod
    def _parse_line(line: str) -> Frame | None:
        line = line.rstrip("\r")

        # Comments, keep-alives and other SSE fields carry no event
        if not line.startswith(DATA_PREFIX):
            if line and not line.startswith(":"):
                logger.debug(f"Ignoring non-data stream line: {line[:100]}")
            return None

        data = line[len(DATA_PREFIX) :]
        if data.startswith(FIELD_SEPARATOR):
            data = data[len(FIELD_SEPARATOR) :]
        return Frame(payload=data.strip())
