from fastapi import APIRouter, Request

from geminirelay import __version__
from geminirelay.models.health import HealthResponse, ProviderStatus

router = APIRouter(tags=["health"])


def provider_status(request: Request) -> ProviderStatus:
    settings = request.app.state.settings
    return ProviderStatus(
        gemini=bool(settings.gemini_api_key),
        openai=bool(settings.openai_api_key),
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, providers=provider_status(request))
