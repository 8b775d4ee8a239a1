import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from geminirelay.config import Settings
from geminirelay.exceptions import MissingPromptError
from geminirelay.models.generate import GenerateRequest, GenerateResponse
from geminirelay.models.health import EndpointInfo
from geminirelay.routes.health import provider_status
from geminirelay.services.gemini_client import GeminiClient, GenerationParams
from geminirelay.services.generate_service import GenerateService
from geminirelay.services.openai_client import OpenAIClient

logger = logging.getLogger("geminirelay.routes")

router = APIRouter(prefix="/api", tags=["generate"])


def build_generation_params(body: GenerateRequest, settings: Settings) -> GenerationParams:
    """Validate the inbound body and fill in generation defaults."""
    prompt = body.resolved_prompt()
    if not prompt:
        raise MissingPromptError()

    return GenerationParams(
        prompt=prompt,
        temperature=(
            body.temperature if body.temperature is not None else settings.default_temperature
        ),
        max_tokens=body.max_tokens if body.max_tokens is not None else settings.default_max_tokens,
    )


def endpoint_info(request: Request, endpoint: str, streaming: bool = False) -> EndpointInfo:
    settings = request.app.state.settings
    return EndpointInfo(
        endpoint=endpoint,
        message=f"Gemini relay - {endpoint.capitalize()} Endpoint",
        model=settings.gemini_model,
        providers=provider_status(request),
        streaming=streaming,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/generate", response_model=EndpointInfo)
async def generate_info(request: Request):
    return endpoint_info(request, "generate")


@router.post("/generate", response_model=GenerateResponse)
async def generate(request: Request, body: GenerateRequest):
    settings = request.app.state.settings
    params = build_generation_params(body, settings)
    logger.info("Generate request: %r", params.prompt[:50])

    http_client = request.app.state.http_client
    service = GenerateService(
        gemini=GeminiClient(http_client, settings),
        openai=OpenAIClient(http_client, settings),
    )
    reply = await service.generate(params)
    return GenerateResponse(reply=reply)
