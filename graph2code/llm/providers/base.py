"""Provider adapter protocol and lifecycle types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Protocol

from graph2code.llm.completion import CompletionCallback
from graph2code.llm.config import ProviderConfig
from graph2code.llm.transport import Transport

TransportFactory = Callable[[ProviderConfig], Transport]


class AdapterState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAULTED = "faulted"


@dataclass(frozen=True)
class EffectiveConfiguration:
    endpoint: str
    auth_token: str
    supports_system_role: bool


class LLMProvider(Protocol):
    """Turns (user content, system content) into one provider request.

    ``send_request`` always completes ``on_complete`` exactly once, with either
    the provider's response body or an ``{"error": ...}`` body.
    """

    name: str
    state: AdapterState

    def initialize(self, config: ProviderConfig | Mapping[str, Any]) -> bool: ...

    def send_request(
        self,
        user_content: str,
        system_content: str,
        on_complete: CompletionCallback,
    ) -> None: ...

    def compute_headers(self) -> dict[str, str]: ...

    def get_effective_configuration(self) -> EffectiveConfiguration: ...
