from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

FINISH_STOP = "STOP"
FINISH_MAX_TOKENS = "MAX_TOKENS"
FINISH_SAFETY = "SAFETY"

DONE_REASONS = (FINISH_STOP, FINISH_MAX_TOKENS)


class EventKind(enum.Enum):
    TOKEN = "token"
    DONE = "done"
    SAFETY_BLOCKED = "safety_blocked"
    UPSTREAM_ERROR = "upstream_error"
    IGNORED = "ignored"

    @property
    def is_terminal(self) -> bool:
        return self in (EventKind.DONE, EventKind.SAFETY_BLOCKED, EventKind.UPSTREAM_ERROR)


@dataclass(frozen=True)
class SSEEvent:
    kind: EventKind
    text: str = ""
    message: str = ""
    finish_reason: str | None = None


IGNORED = SSEEvent(EventKind.IGNORED)


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _candidate_text(candidate: Any) -> str:
    parts = _get(_get(candidate, "content"), "parts")
    if not isinstance(parts, list):
        return ""
    return "".join(
        text for text in (_get(part, "text") for part in parts) if isinstance(text, str)
    )


def extract_events(payload: Any) -> list[SSEEvent]:
    """Map one decoded upstream payload to the events it carries, in order.

    Only candidate 0 is looked at. A payload may carry a token and a finish
    reason together, in which case the token comes first. Missing or
    oddly-typed fields are treated as absent.
    """
    error = _get(payload, "error")
    if error:
        message = error if isinstance(error, str) else _get(error, "message")
        if not isinstance(message, str) or not message:
            message = "Gemini error"
        return [SSEEvent(EventKind.UPSTREAM_ERROR, message=message)]

    candidate = _first(_get(payload, "candidates"))
    if candidate is None:
        # The prompt itself can be rejected before any candidate is produced
        block_reason = _get(_get(payload, "promptFeedback"), "blockReason")
        if block_reason == FINISH_SAFETY:
            return [SSEEvent(EventKind.SAFETY_BLOCKED, finish_reason=block_reason)]
        return [IGNORED]

    events = []
    text = _candidate_text(candidate)
    if text:
        events.append(SSEEvent(EventKind.TOKEN, text=text))

    finish_reason = _get(candidate, "finishReason")
    if finish_reason == FINISH_SAFETY:
        events.append(SSEEvent(EventKind.SAFETY_BLOCKED, finish_reason=finish_reason))
    elif finish_reason in DONE_REASONS:
        events.append(SSEEvent(EventKind.DONE, finish_reason=finish_reason))

    return events or [IGNORED]


def extract(payload: Any) -> SSEEvent:
    """Return the single most significant event of a payload."""
    events = extract_events(payload)
    for event in events:
        if event.kind.is_terminal:
            return event
    return events[0]
