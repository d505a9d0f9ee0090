"""Provider adapters for graph translation requests."""

from graph2code.llm.providers.base import (
    AdapterState,
    EffectiveConfiguration,
    LLMProvider,
    TransportFactory,
)
from graph2code.llm.providers.openai import DEFAULT_ENDPOINT, OpenAIProvider

__all__ = [
    "DEFAULT_ENDPOINT",
    "AdapterState",
    "EffectiveConfiguration",
    "LLMProvider",
    "OpenAIProvider",
    "TransportFactory",
]
