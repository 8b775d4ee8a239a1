from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from geminirelay.config import Settings

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


@dataclass
class GenerationParams:
    prompt: str
    temperature: float
    max_tokens: int


class GeminiClient:
    """Thin wrapper over the Gemini generateContent endpoints."""

    provider = "Gemini"

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.http_client = http_client
        self.api_key = settings.gemini_api_key
        self.model = settings.gemini_model
        self.base_url = settings.gemini_api_url.rstrip("/")
        self.top_p = settings.top_p
        self.top_k = settings.top_k
        self.safety_threshold = settings.safety_threshold

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _model_url(self, method: str) -> str:
        return f"{self.base_url}/models/{quote(self.model, safe='')}:{method}"

    @property
    def generate_url(self) -> str:
        return self._model_url("generateContent")

    @property
    def stream_url(self) -> str:
        return self._model_url("streamGenerateContent")

    def build_headers(self) -> dict:
        return {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

    def build_payload(self, params: GenerationParams) -> dict:
        return {
            "contents": [{"parts": [{"text": params.prompt}], "role": "user"}],
            "generationConfig": {
                "temperature": params.temperature,
                "maxOutputTokens": params.max_tokens,
                "topP": self.top_p,
                "topK": self.top_k,
            },
            "safetySettings": [
                {"category": category, "threshold": self.safety_threshold}
                for category in SAFETY_CATEGORIES
            ],
        }

    async def generate(self, params: GenerationParams) -> httpx.Response:
        return await self.http_client.post(
            self.generate_url, json=self.build_payload(params), headers=self.build_headers()
        )

    def open_stream(self, params: GenerationParams):
        """Return the httpx streaming context manager for an SSE generation."""
        return self.http_client.stream(
            "POST",
            self.stream_url,
            params={"alt": "sse"},
            json=self.build_payload(params),
            headers=self.build_headers(),
        )
