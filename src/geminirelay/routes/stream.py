import functools
import logging

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from geminirelay.exceptions import ProviderNotConfiguredError
from geminirelay.models.generate import GenerateRequest
from geminirelay.models.health import EndpointInfo
from geminirelay.relay.sink import RelaySink
from geminirelay.relay.writers import QueueWriter
from geminirelay.routes.generate import build_generation_params, endpoint_info
from geminirelay.services.gemini_client import GeminiClient
from geminirelay.services.stream_service import StreamRelay
from geminirelay.utils.sse import SSE_HEADERS

logger = logging.getLogger("geminirelay.routes")

router = APIRouter(prefix="/api", tags=["stream"])


@router.get("/stream", response_model=EndpointInfo)
async def stream_info(request: Request):
    return endpoint_info(request, "stream", streaming=True)


@router.post("/stream")
async def stream(request: Request, body: GenerateRequest):
    settings = request.app.state.settings
    params = build_generation_params(body, settings)
    logger.info("Stream request: %r", params.prompt[:50])

    gemini = GeminiClient(request.app.state.http_client, settings)
    if not gemini.configured:
        logger.error("GEMINI_API_KEY not configured")
        raise ProviderNotConfiguredError(
            "GEMINI_API_KEY not configured",
            hint="Set GEMINI_API_KEY in the environment",
        )

    writer = QueueWriter()
    relay = StreamRelay(gemini)
    start = functools.partial(relay.run, params, RelaySink(writer))

    return StreamingResponse(
        writer.frames(start),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
