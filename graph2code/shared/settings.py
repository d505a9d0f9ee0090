"""Runtime settings for the translation provider, from YAML and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from graph2code.llm.capabilities import DEFAULT_SUPPORTS_SYSTEM_ROLE, GPT_4O
from graph2code.llm.config import ProviderConfig, redact_secret
from graph2code.llm.transport import DEFAULT_TIMEOUT_S

_ENV_KEYS = {
    "api_key": ("G2C_OPENAI_API_KEY", "OPENAI_API_KEY"),
    "model": ("G2C_OPENAI_MODEL",),
    "endpoint": ("G2C_OPENAI_ENDPOINT",),
    "organization_id": ("G2C_OPENAI_ORGANIZATION", "OPENAI_ORG_ID"),
    "source_files": ("G2C_SOURCE_FILES",),
    "timeout_s": ("G2C_HTTP_TIMEOUT_S",),
    "log_level": ("G2C_LOG_LEVEL",),
    "default_supports_system_role": ("G2C_DEFAULT_SYSTEM_ROLE",),
}


DEFAULT_LOG_LEVEL = "WARNING"


def _as_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _as_paths(value: Any) -> tuple[Path, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(os.pathsep)
    return tuple(Path(str(item).strip()) for item in value if str(item).strip())


@dataclass(frozen=True)
class ProviderSettings:
    """Everything needed to initialize a provider adapter and its transport."""

    api_key: str
    model: str
    endpoint: str
    organization_id: str
    source_files: tuple[Path, ...]
    timeout_s: float
    log_level: str
    default_supports_system_role: bool

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "ProviderSettings":
        return cls(
            api_key=str(values.get("api_key") or "").strip(),
            model=str(values.get("model") or GPT_4O).strip(),
            endpoint=str(values.get("endpoint") or "").strip(),
            organization_id=str(values.get("organization_id") or "").strip(),
            source_files=_as_paths(values.get("source_files")),
            timeout_s=float(values.get("timeout_s") or DEFAULT_TIMEOUT_S),
            log_level=str(values.get("log_level") or DEFAULT_LOG_LEVEL).strip().upper(),
            default_supports_system_role=_as_bool(
                values.get("default_supports_system_role"), DEFAULT_SUPPORTS_SYSTEM_ROLE
            ),
        )

    def config_values(self) -> dict[str, str]:
        return {
            "endpoint": self.endpoint,
            "api_key": self.api_key,
            "model": self.model,
            "organization_id": self.organization_id,
        }

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig.model_validate(self.config_values())

    def redacted(self) -> dict[str, Any]:
        return {
            **self.config_values(),
            "api_key": redact_secret(self.api_key),
            "source_files": [str(path) for path in self.source_files],
            "timeout_s": self.timeout_s,
            "log_level": self.log_level,
            "default_supports_system_role": self.default_supports_system_role,
        }


def _load_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    document = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(document, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    unknown = sorted(set(document) - set(_ENV_KEYS))
    if unknown:
        raise ValueError(f"Unknown settings keys in {path}: {', '.join(unknown)}")
    return document


def load_provider_settings(
    path: Path | None = None,
    env: dict[str, str] | None = None,
) -> ProviderSettings:
    """Build settings from an optional YAML file, overridden by environment variables."""

    source = env if env is not None else os.environ
    values: dict[str, Any] = _load_settings_file(path) if path is not None else {}
    for field_name, env_names in _ENV_KEYS.items():
        for env_name in env_names:
            env_value = source.get(env_name, "").strip()
            if env_value:
                values[field_name] = env_value
                break
    return ProviderSettings.from_mapping(values)


def log_level_from_env(env: dict[str, str] | None = None) -> str:
    """Resolve only the log level, without parsing the remaining settings."""

    source = env if env is not None else os.environ
    for env_name in _ENV_KEYS["log_level"]:
        env_value = source.get(env_name, "").strip()
        if env_value:
            return env_value.upper()
    return DEFAULT_LOG_LEVEL
