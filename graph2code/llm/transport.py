"""HTTP transport collaborator for chat-completion requests."""

from __future__ import annotations

import logging
from typing import Protocol

import requests

from graph2code.llm.completion import CompletionCallback
from graph2code.llm.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 120.0


class Transport(Protocol):
    """Performs the network call and completes ``on_complete`` exactly once.

    Failures are reported as ``{"error": ...}`` bodies, not raised.
    """

    extra_headers: dict[str, str]

    def post(
        self,
        endpoint: str,
        auth_token: str,
        payload: str,
        on_complete: CompletionCallback,
    ) -> None: ...


class RequestsTransport:
    def __init__(
        self,
        session: requests.Session | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout_s = max(1.0, float(timeout_s))
        self.extra_headers = dict(extra_headers or {})

    def _headers(self, auth_token: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        headers.update(self.extra_headers)
        return headers

    def post(
        self,
        endpoint: str,
        auth_token: str,
        payload: str,
        on_complete: CompletionCallback,
    ) -> None:
        try:
            response = self.session.post(
                endpoint,
                data=payload.encode("utf-8"),
                headers=self._headers(auth_token),
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            logger.error("Request to %s failed: %s", endpoint, exc)
            body = TransportError(f"Request failed: {exc}").as_body()
        else:
            if response.ok:
                body = response.text
            else:
                logger.error("Request to %s returned HTTP %s", endpoint, response.status_code)
                body = TransportError(
                    f"HTTP Error {response.status_code}",
                    status_code=response.status_code,
                    body=response.text,
                ).as_body()
        on_complete(body)
