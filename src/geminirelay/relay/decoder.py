from __future__ import annotations

import json
import logging

from geminirelay.utils.sse import DONE_SENTINEL

logger = logging.getLogger("geminirelay.relay")

DATA_PREFIX = "data:"


def decode_line(line: str) -> dict | None:
    """Return the JSON object carried by an SSE ``data:`` line, or None.

    Blank lines, comments, other SSE fields, the ``[DONE]`` sentinel and
    payloads that do not parse as a JSON object are all skipped. A parse
    failure is expected while a fragment is still incomplete, so it is only
    logged at debug level.
    """
    line = line.strip()
    if not line or not line.startswith(DATA_PREFIX):
        return None

    raw = line[len(DATA_PREFIX):].strip()
    if not raw or raw == DONE_SENTINEL:
        return None

    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError):
        logger.debug("Parse skip: %s", raw[:50])
        return None

    if not isinstance(payload, dict):
        logger.debug("Skipping non-object payload: %s", raw[:50])
        return None
    return payload
