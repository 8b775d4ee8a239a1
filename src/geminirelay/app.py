import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geminirelay import __version__
from geminirelay.config import Settings, get_settings
from geminirelay.exceptions import RelayError
from geminirelay.middleware.error_handler import ErrorHandlerMiddleware, relay_error_handler
from geminirelay.routes import generate, health, stream

logger = logging.getLogger("geminirelay")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Shared HTTP client for upstream providers
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.upstream_timeout_s),
    )

    logger.info(
        "Gemini relay v%s started | model=%s | gemini=%s | openai=%s",
        __version__,
        settings.gemini_model,
        "on" if settings.gemini_api_key else "off",
        "on" if settings.openai_api_key else "off",
    )

    yield

    # Shutdown
    await app.state.http_client.aclose()
    logger.info("Gemini relay shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Gemini Relay",
        description="Streaming and non-streaming relay for the Gemini generative-language API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app.state.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(RelayError, relay_error_handler)

    app.include_router(health.router)
    app.include_router(generate.router)
    app.include_router(stream.router)

    return app
