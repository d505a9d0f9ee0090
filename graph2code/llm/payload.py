"""Chat-completion wire payload construction."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from graph2code.llm.capabilities import (
    DEFAULT_SUPPORTS_SYSTEM_ROLE,
    supports_structured_output,
    supports_system_role,
)
from graph2code.llm.config import ProviderConfig
from graph2code.llm.prompts import PromptMerger
from graph2code.llm.schema import load_translation_schema

DETERMINISTIC_TEMPERATURE = 0.0
MAX_OUTPUT_TOKENS = 8192


@dataclass(frozen=True)
class ChatMessage:
    role: Literal["system", "user"]
    content: str

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class RequestPayload:
    """Normalized request; serialized once and then discarded."""

    model: str
    messages: tuple[ChatMessage, ...]
    response_schema: dict[str, Any] | None = None
    temperature: float | None = None
    max_tokens: int | None = None

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"model": self.model}
        if self.response_schema is not None:
            wire["response_format"] = {"type": "json_schema", "json_schema": self.response_schema}
        if self.temperature is not None:
            wire["temperature"] = self.temperature
        if self.max_tokens is not None:
            wire["max_tokens"] = self.max_tokens
        wire["messages"] = [message.to_wire() for message in self.messages]
        return wire

    def serialize(self) -> str:
        return json.dumps(self.to_wire())


def build_request_payload(
    user_content: str,
    system_content: str,
    config: ProviderConfig,
    *,
    prompt_merger: PromptMerger | None = None,
    default_supports_system_role: bool = DEFAULT_SUPPORTS_SYSTEM_ROLE,
) -> RequestPayload:
    """Build the wire payload for one request.

    Models without a system role receive the system instructions merged into
    the user message and keep their provider-default sampling parameters.

    Raises:
        SchemaParseError: if the response schema asset cannot be parsed.
    """
    merger = prompt_merger or PromptMerger()
    system_role = supports_system_role(config.model, default=default_supports_system_role)

    if system_role:
        final_content = user_content
    else:
        final_content = merger.merge(user_content, system_content)
    final_content = merger.augment_with_source_material(final_content)

    schema = load_translation_schema()

    messages: list[ChatMessage] = []
    if system_role:
        messages.append(ChatMessage(role="system", content=system_content))
    messages.append(ChatMessage(role="user", content=final_content))

    return RequestPayload(
        model=config.model,
        messages=tuple(messages),
        response_schema=schema if supports_structured_output(config.model) else None,
        temperature=DETERMINISTIC_TEMPERATURE if system_role else None,
        max_tokens=MAX_OUTPUT_TOKENS if system_role else None,
    )
