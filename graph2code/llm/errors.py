"""Provider error taxonomy and the error-shaped response body convention."""

from __future__ import annotations

import json
from typing import Any


class ProviderError(Exception):
    """Base error for the provider adapter layer."""

    default_message = "provider_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    def as_dict(self) -> dict[str, Any]:
        return {"error": str(self)}

    def as_body(self) -> str:
        """Encode the error the way transports report failures to callbacks."""
        return json.dumps(self.as_dict())


class NotInitializedError(ProviderError):
    default_message = "Service not initialized"


class DependencyConstructionError(ProviderError):
    default_message = "Failed to construct provider dependency"


class SchemaParseError(ProviderError):
    default_message = "Failed to parse JSON schema"


class TransportError(ProviderError):
    """Raised or encoded when the network call fails before a usable body arrives."""

    default_message = "transport_failed"

    def __init__(self, message: str | None = None, *, status_code: int = -1, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": str(self)}
        if self.status_code > 0:
            payload["status_code"] = self.status_code
        if self.body:
            payload["body"] = self.body
        return payload


class ResponseParseError(ProviderError):
    """Raised when a provider response is not a valid graph translation."""

    default_message = "response_parse_failed"

    def __init__(self, message: str | None = None, *, errors: list[dict[str, str]]) -> None:
        super().__init__(message)
        self.errors = errors

    def as_dict(self) -> dict[str, Any]:
        return {"error": str(self), "validation": {"errors": self.errors}}


def is_error_body(body: str) -> bool:
    """Return True when a completion body follows the ``{"error": ...}`` convention."""
    try:
        parsed = json.loads(body)
    except (TypeError, json.JSONDecodeError):
        return False
    return isinstance(parsed, dict) and "error" in parsed and "choices" not in parsed
