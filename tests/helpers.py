import asyncio
import json

import httpx


class ChunkedStream(httpx.AsyncByteStream):
    """Upstream body delivered in exactly the given chunks.

    Optionally raises ``error`` after the last chunk, or hangs forever to
    emulate a generation that is still in progress.
    """

    def __init__(self, chunks, error: Exception | None = None, hang: bool = False):
        self.chunks = [c.encode() if isinstance(c, str) else c for c in chunks]
        self.error = error
        self.hang = hang
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error
        if self.hang:
            await asyncio.Event().wait()

    async def aclose(self):
        self.closed = True


class RecordingWriter:
    """Downstream writer that keeps every frame it receives."""

    def __init__(self, fail_on_write: bool = False):
        self.frames: list[str] = []
        self.close_calls = 0
        self.disconnected = False
        self.fail_on_write = fail_on_write

    async def write(self, frame: str) -> None:
        if self.fail_on_write:
            raise ConnectionResetError("client went away")
        self.frames.append(frame)

    async def close(self) -> None:
        self.close_calls += 1

    @property
    def body(self) -> str:
        return "".join(self.frames)


def sse(payload) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def candidate(text: str | None = None, finish_reason: str | None = None) -> dict:
    cand = {}
    if text is not None:
        cand["content"] = {"parts": [{"text": text}], "role": "model"}
    if finish_reason is not None:
        cand["finishReason"] = finish_reason
    return {"candidates": [cand]}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def asgi_client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
