from __future__ import annotations

from pydantic import BaseModel


class ProviderStatus(BaseModel):
    gemini: bool = False
    openai: bool = False


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    providers: ProviderStatus


class EndpointInfo(BaseModel):
    ok: bool = True
    endpoint: str
    message: str
    model: str
    providers: ProviderStatus
    streaming: bool = False
    timestamp: str
