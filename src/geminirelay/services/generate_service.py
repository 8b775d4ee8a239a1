from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from geminirelay.exceptions import (
    EmptyReplyError,
    ProviderNotConfiguredError,
    UpstreamAPIError,
    UpstreamRequestError,
)
from geminirelay.services.gemini_client import GeminiClient, GenerationParams
from geminirelay.services.openai_client import OpenAIClient

logger = logging.getLogger("geminirelay.generate")


def _dig(obj: Any, *path: str | int) -> Any:
    for key in path:
        if isinstance(key, int):
            if not isinstance(obj, list) or len(obj) <= key:
                return None
            obj = obj[key]
        else:
            if not isinstance(obj, dict):
                return None
            obj = obj.get(key)
    return obj


def _stripped(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_text(obj: Any) -> str | None:
    """Pull the reply text out of a Gemini, OpenAI or generic response body.

    Falls back to the JSON encoding of the whole body when no known field
    carries text, so callers always get something to show.
    """
    if not obj:
        return None

    text = _stripped(_dig(obj, "candidates", 0, "content", "parts", 0, "text"))
    if text:
        return text

    parts = _dig(obj, "candidates", 0, "content", "parts")
    if isinstance(parts, list) and parts:
        joined = "\n\n".join(
            part["text"] for part in parts if isinstance(part, dict) and part.get("text")
        )
        if joined.strip():
            return joined.strip()

    for path in (
        ("choices", 0, "message", "content"),
        ("choices", 0, "text"),
        ("text",),
        ("response", "text"),
        ("content",),
        ("outputs", 0, "content", 0, "text"),
    ):
        text = _stripped(_dig(obj, *path))
        if text:
            return text

    return json.dumps(obj)


def _error_details(data: Any) -> Any:
    return _dig(data, "error", "message") or data


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


class GenerateService:
    """Non-streaming generation with Gemini first and OpenAI as fallback.

    The fallback only kicks in when the Gemini request fails in transport;
    an error status from Gemini is reported as is.
    """

    def __init__(self, gemini: GeminiClient, openai: OpenAIClient):
        self.gemini = gemini
        self.openai = openai

    async def generate(self, params: GenerationParams) -> str:
        if self.gemini.configured:
            try:
                return await self._generate_gemini(params)
            except httpx.HTTPError as exc:
                logger.error("Gemini fetch error: %s", exc)
                if not self.openai.configured:
                    raise UpstreamRequestError("Gemini request failed", details=str(exc)) from exc
                logger.info("Falling back to OpenAI...")

        if self.openai.configured:
            try:
                return await self._generate_openai(params)
            except httpx.HTTPError as exc:
                logger.error("OpenAI fetch error: %s", exc)
                raise UpstreamRequestError("OpenAI request failed", details=str(exc)) from exc

        raise ProviderNotConfiguredError(
            "No LLM provider configured",
            hint="Set GEMINI_API_KEY or OPENAI_API_KEY in environment variables",
        )

    async def _generate_gemini(self, params: GenerationParams) -> str:
        logger.info("Calling Gemini (%s)...", self.gemini.model)
        resp = await self.gemini.generate(params)
        data = _json_or_none(resp)
        logger.info("Gemini response status: %d", resp.status_code)

        if not resp.is_success:
            logger.error("Gemini API error: %d %s", resp.status_code, data)
            raise UpstreamAPIError("Gemini", resp.status_code, _error_details(data))

        reply = extract_text(data)
        if not reply:
            logger.error("No text in Gemini response: %s", data)
            raise EmptyReplyError("No text in Gemini response", raw=data)

        logger.info("Gemini replied: %r", reply[:50])
        return reply

    async def _generate_openai(self, params: GenerationParams) -> str:
        logger.info("Calling OpenAI (%s)...", self.openai.model)
        resp = await self.openai.generate(params)
        data = _json_or_none(resp)

        if not resp.is_success:
            logger.error("OpenAI API error: %d %s", resp.status_code, data)
            raise UpstreamAPIError("OpenAI", resp.status_code, _error_details(data))

        reply = extract_text(data) or "No response"
        logger.info("OpenAI replied: %r", reply[:50])
        return reply
