from __future__ import annotations

from typing import Any


class RelayError(Exception):
    """Base error rendered to clients as ``{"ok": false, "error": ...}``."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_content(self) -> dict:
        return {"ok": False, "error": self.message, **self.extra}


class MissingPromptError(RelayError):
    status_code = 400

    def __init__(self):
        super().__init__(
            "Missing 'prompt' in request body.",
            usage={"method": "POST", "body": {"prompt": "Your message here"}},
        )


class ProviderNotConfiguredError(RelayError):
    status_code = 500


class UpstreamAPIError(RelayError):
    """The provider answered with a non-success status."""

    status_code = 502

    def __init__(self, provider: str, status: int, details: Any = None):
        super().__init__(f"{provider} API error", status=status, details=details)
        self.provider = provider
        self.status = status


class EmptyReplyError(RelayError):
    status_code = 502


class UpstreamRequestError(RelayError):
    """The request to the provider failed before a response arrived."""

    status_code = 500
