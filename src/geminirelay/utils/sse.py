from __future__ import annotations

import json

DONE_SENTINEL = "[DONE]"

# Disable proxy and browser buffering so tokens arrive as they are produced
SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse_chunk(data: dict) -> str:
    payload = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return f"data: {payload}\n\n"


def format_sse_done() -> str:
    return f"data: {DONE_SENTINEL}\n\n"
