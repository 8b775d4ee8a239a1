from __future__ import annotations

import httpx

from geminirelay.config import Settings
from geminirelay.services.gemini_client import GenerationParams


class OpenAIClient:
    provider = "OpenAI"

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.http_client = http_client
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.base_url = settings.openai_api_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, params: GenerationParams) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": params.prompt}],
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
        }

    async def generate(self, params: GenerationParams) -> httpx.Response:
        return await self.http_client.post(
            f"{self.base_url}/chat/completions",
            json=self.build_payload(params),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
