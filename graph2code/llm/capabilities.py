"""Model identifiers and their request-shaping capability flags."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

GPT_4O = "gpt-4o"
GPT_4O_2024_08_06 = "gpt-4o-2024-08-06"
GPT_4O_MINI = "gpt-4o-mini"
GPT_4O_MINI_2024_07_18 = "gpt-4o-mini-2024-07-18"
GPT_4_1 = "gpt-4.1"
O1 = "o1"
O1_PREVIEW = "o1-preview"
O1_PREVIEW_2024_09_12 = "o1-preview-2024-09-12"
O1_MINI = "o1-mini"
O1_MINI_2024_09_12 = "o1-mini-2024-09-12"
O3 = "o3"
O3_MINI = "o3-mini"
O4_MINI = "o4-mini"

# Unknown models keep their system instructions rather than having them merged away.
DEFAULT_SUPPORTS_SYSTEM_ROLE = True


@dataclass(frozen=True)
class ModelCapability:
    model_id: str
    supports_system_role: bool


def _table(*rows: ModelCapability) -> Mapping[str, ModelCapability]:
    return MappingProxyType({row.model_id: row for row in rows})


MODEL_CAPABILITIES: Mapping[str, ModelCapability] = _table(
    ModelCapability(GPT_4O, supports_system_role=True),
    ModelCapability(GPT_4O_2024_08_06, supports_system_role=True),
    ModelCapability(GPT_4O_MINI, supports_system_role=True),
    ModelCapability(GPT_4O_MINI_2024_07_18, supports_system_role=True),
    ModelCapability(GPT_4_1, supports_system_role=True),
    ModelCapability(O1, supports_system_role=True),
    ModelCapability(O3, supports_system_role=True),
    ModelCapability(O3_MINI, supports_system_role=True),
    ModelCapability(O4_MINI, supports_system_role=True),
    ModelCapability(O1_PREVIEW, supports_system_role=False),
    ModelCapability(O1_PREVIEW_2024_09_12, supports_system_role=False),
    ModelCapability(O1_MINI, supports_system_role=False),
    ModelCapability(O1_MINI_2024_09_12, supports_system_role=False),
)

STRUCTURED_OUTPUT_DENYLIST = frozenset(
    {
        O1_PREVIEW,
        O1_PREVIEW_2024_09_12,
        O1_MINI,
        O1_MINI_2024_09_12,
    }
)


def get_model_capability(model_id: str) -> ModelCapability | None:
    return MODEL_CAPABILITIES.get(model_id)


def supports_system_role(model_id: str, default: bool = DEFAULT_SUPPORTS_SYSTEM_ROLE) -> bool:
    capability = MODEL_CAPABILITIES.get(model_id)
    if capability is None:
        return default
    return capability.supports_system_role


def supports_structured_output(model_id: str) -> bool:
    return model_id not in STRUCTURED_OUTPUT_DENYLIST
