from __future__ import annotations

import logging

import httpx

from geminirelay.relay.decoder import decode_line
from geminirelay.relay.extractor import EventKind, extract_events
from geminirelay.relay.lines import LineReassembler
from geminirelay.relay.sink import RelaySink
from geminirelay.services.gemini_client import GeminiClient, GenerationParams

logger = logging.getLogger("geminirelay.stream")

STREAM_FAILURE_MESSAGE = "Stream processing failed"


class StreamRelay:
    """Relays one Gemini SSE generation to a downstream sink.

    Pipeline: upstream bytes -> LineReassembler -> decode_line ->
    extract_events -> RelaySink. The sink is closed on every exit path,
    which writes the terminal marker exactly once.
    """

    def __init__(self, gemini: GeminiClient):
        self.gemini = gemini

    async def run(self, params: GenerationParams, sink: RelaySink) -> None:
        logger.info("Starting stream with %s...", self.gemini.model)
        try:
            async with self.gemini.open_stream(params) as resp:
                if not resp.is_success:
                    body = await resp.aread()
                    logger.error(
                        "Gemini stream error: %d %s",
                        resp.status_code,
                        body.decode(errors="replace")[:500],
                    )
                    await sink.send_error(f"Gemini API error: {resp.status_code}")
                    return

                sink.start_streaming()
                logger.info("Stream connected, processing...")
                await self._pump(resp, sink)
        except httpx.TimeoutException:
            logger.error("Upstream timeout")
            await sink.send_error("Upstream timeout")
        except httpx.HTTPError as exc:
            logger.error("Cannot connect to upstream: %s", exc)
            await sink.send_error("Cannot connect to upstream")
        except Exception:
            logger.exception("Stream handler error")
            await sink.send_error(STREAM_FAILURE_MESSAGE)
        finally:
            await sink.close()
            logger.info("Stream finished. Total tokens: %d", sink.state.tokens_sent)

    async def _pump(self, resp: httpx.Response, sink: RelaySink) -> None:
        reassembler = LineReassembler()
        try:
            async for chunk in resp.aiter_bytes():
                for line in reassembler.feed(chunk):
                    if not await self._dispatch(line, sink):
                        return
                if not sink.is_open:
                    return
        except Exception:
            logger.exception("Error while reading upstream stream")
            if await self._flush(reassembler, sink):
                await sink.send_error(STREAM_FAILURE_MESSAGE)
            return

        logger.info("Upstream stream exhausted")
        await self._flush(reassembler, sink)

    async def _flush(self, reassembler: LineReassembler, sink: RelaySink) -> bool:
        """Process a trailing unterminated line. Returns False once terminated."""
        try:
            for line in reassembler.flush():
                if not await self._dispatch(line, sink):
                    return False
        except Exception:
            logger.debug("Ignoring final buffer error", exc_info=True)
        return sink.is_open

    async def _dispatch(self, line: str, sink: RelaySink) -> bool:
        """Forward the events of one line. Returns False when the relay must stop."""
        payload = decode_line(line)
        if payload is None:
            return True

        for event in extract_events(payload):
            if event.kind is EventKind.TOKEN:
                if await sink.send_token(event.text) and sink.state.tokens_sent <= 3:
                    logger.info("Token %d: %r", sink.state.tokens_sent, event.text[:20])
            elif event.kind is EventKind.DONE:
                logger.info("Finish reason: %s", event.finish_reason)
                return False
            elif event.kind is EventKind.SAFETY_BLOCKED:
                logger.warning("Response blocked by safety filters")
                await sink.send_safety_block()
                return False
            elif event.kind is EventKind.UPSTREAM_ERROR:
                logger.error("Gemini error in stream: %s", event.message)
                await sink.send_error(event.message)
                return False

        return sink.is_open
