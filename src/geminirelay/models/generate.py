from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt: str | None = None
    # Older clients send the prompt under one of these keys
    text: str | None = None
    message: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None

    @field_validator("prompt", "text", "message", mode="before")
    @classmethod
    def _non_string_is_missing(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    def resolved_prompt(self) -> str | None:
        for value in (self.prompt, self.text, self.message):
            if value is not None:
                return value or None
        return None


class GenerateResponse(BaseModel):
    ok: bool = True
    reply: str
