"""Provider configuration contract."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderConfig(BaseModel):
    """Connection settings owned by a single provider adapter."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    endpoint: str = ""
    api_key: str = ""
    model: str = Field(min_length=1)
    organization_id: str = ""

    @field_validator("endpoint")
    @classmethod
    def _endpoint_is_http_url(cls, value: str) -> str:
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return value

    def redacted(self) -> dict[str, str]:
        return {
            "endpoint": self.endpoint,
            "api_key": redact_secret(self.api_key),
            "model": self.model,
            "organization_id": self.organization_id,
        }


def redact_secret(secret: str) -> str:
    if not secret:
        return "unset"
    if len(secret) <= 8:
        return "***"
    return f"{secret[:4]}...{secret[-4:]}"
