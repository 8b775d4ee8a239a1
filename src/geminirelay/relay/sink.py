from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from geminirelay.utils.sse import format_sse_chunk, format_sse_done

logger = logging.getLogger("geminirelay.relay")

SAFETY_BLOCK_MESSAGE = "Response blocked by safety filters"


class DownstreamWriter(Protocol):
    disconnected: bool

    async def write(self, frame: str) -> None: ...

    async def close(self) -> None: ...


class RelayPhase(enum.Enum):
    OPEN = "open"
    STREAMING = "streaming"
    TERMINATED = "terminated"


@dataclass
class RelayState:
    phase: RelayPhase = RelayPhase.OPEN
    done_sent: bool = False
    closed: bool = False
    tokens_sent: int = 0
    errors_sent: int = 0


class RelaySink:
    """Writes the downstream SSE protocol for one relay operation.

    Guarantees a single ``[DONE]`` marker and a single close of the writer,
    whatever path the relay takes. Once the sink is closed or the client is
    gone, every write is a silent no-op.
    """

    def __init__(self, writer: DownstreamWriter):
        self.writer = writer
        self.state = RelayState()

    @property
    def is_open(self) -> bool:
        return not self.state.closed and not self.writer.disconnected

    def start_streaming(self) -> None:
        if self.state.phase is RelayPhase.OPEN:
            self.state.phase = RelayPhase.STREAMING

    async def _write(self, frame: str) -> bool:
        if not self.is_open:
            return False
        try:
            await self.writer.write(frame)
        except Exception as exc:
            # A failed write means the client went away
            logger.warning("SSE write error: %s", exc)
            self.writer.disconnected = True
            return False
        return True

    async def send_token(self, text: str) -> bool:
        sent = await self._write(format_sse_chunk({"token": text}))
        if sent:
            self.state.tokens_sent += 1
        return sent

    async def send_error(self, message: str, **extra: Any) -> bool:
        sent = await self._write(format_sse_chunk({"error": message, **extra}))
        if sent:
            self.state.errors_sent += 1
        return sent

    async def send_safety_block(self) -> bool:
        return await self.send_error(SAFETY_BLOCK_MESSAGE, finishReason="SAFETY")

    async def send_done(self) -> None:
        if self.state.done_sent:
            return
        self.state.done_sent = True
        await self._write(format_sse_done())

    async def close(self) -> None:
        """Send the terminal marker if still missing, then release the writer."""
        if self.state.closed:
            return
        await self.send_done()
        self.state.closed = True
        self.state.phase = RelayPhase.TERMINATED
        await self.writer.close()
