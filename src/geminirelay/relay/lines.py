from __future__ import annotations

import codecs


class LineReassembler:
    """Turns arbitrarily cut upstream chunks into complete lines.

    Bytes are decoded with an incremental UTF-8 decoder, so a multi-byte
    character split across two chunks is rebuilt instead of being mangled.
    The trailing fragment after the last ``\\n`` stays buffered until a later
    chunk terminates it or :meth:`flush` is called at end of stream.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[str]:
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        if not chunk:
            return []

        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        return lines

    def flush(self) -> list[str]:
        """Return the unterminated remainder (if any) and reset the buffer."""
        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        self._decoder.reset()
        if not remainder.strip():
            return []
        return [remainder]
