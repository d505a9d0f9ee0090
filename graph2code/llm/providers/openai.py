"""OpenAI-compatible chat-completion provider adapter."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Mapping

from pydantic import ValidationError

from graph2code.llm.capabilities import DEFAULT_SUPPORTS_SYSTEM_ROLE, supports_system_role
from graph2code.llm.completion import CompletionCallback, SingleShotCompletion
from graph2code.llm.config import ProviderConfig
from graph2code.llm.errors import (
    DependencyConstructionError,
    NotInitializedError,
    SchemaParseError,
    TransportError,
)
from graph2code.llm.payload import build_request_payload
from graph2code.llm.prompts import PromptMerger, SourceMaterialProvider
from graph2code.llm.providers.base import (
    AdapterState,
    EffectiveConfiguration,
    LLMProvider,
    TransportFactory,
)
from graph2code.llm.responses import TranslationResponse, parse_chat_completion
from graph2code.llm.transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
ORGANIZATION_HEADER = "OpenAI-Organization"


def _describe_validation_error(exc: ValidationError) -> str:
    # Field locations only; input values may carry the API key.
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
        for error in exc.errors()
    )


def _default_transport_factory(config: ProviderConfig) -> Transport:
    return RequestsTransport()


class OpenAIProvider(LLMProvider):
    """Adapter for OpenAI and OpenAI-compatible chat-completion endpoints."""

    name = "openai"
    default_endpoint = DEFAULT_ENDPOINT

    def __init__(
        self,
        transport_factory: TransportFactory | None = None,
        source_provider: SourceMaterialProvider | None = None,
        default_supports_system_role: bool = DEFAULT_SUPPORTS_SYSTEM_ROLE,
    ) -> None:
        self._transport_factory = transport_factory or _default_transport_factory
        self._source_provider = source_provider
        self._default_supports_system_role = default_supports_system_role
        self.state = AdapterState.UNINITIALIZED
        self.config: ProviderConfig | None = None
        self.transport: Transport | None = None
        self.prompt_merger: PromptMerger | None = None

    def _fault(self, error: Exception) -> bool:
        self.state = AdapterState.FAULTED
        self.transport = None
        self.prompt_merger = None
        logger.error("Provider %s initialization failed: %s", self.name, error)
        return False

    def initialize(self, config: ProviderConfig | Mapping[str, Any]) -> bool:
        self.state = AdapterState.UNINITIALIZED
        try:
            resolved = (
                config
                if isinstance(config, ProviderConfig)
                else ProviderConfig.model_validate(dict(config))
            )
        except ValidationError as exc:
            self.config = None
            return self._fault(ValueError(_describe_validation_error(exc)))
        except (TypeError, ValueError) as exc:
            self.config = None
            return self._fault(exc)

        if not resolved.endpoint:
            resolved = resolved.model_copy(update={"endpoint": self.default_endpoint})
        self.config = resolved

        try:
            transport = self._transport_factory(resolved)
            transport.extra_headers = self.compute_headers()
        except Exception as exc:
            return self._fault(DependencyConstructionError(f"Failed to create HTTP transport: {exc}"))

        try:
            prompt_merger = PromptMerger(self._source_provider)
        except Exception as exc:
            return self._fault(
                DependencyConstructionError(f"Failed to create system prompt manager: {exc}")
            )

        self.transport = transport
        self.prompt_merger = prompt_merger
        self.state = AdapterState.READY
        logger.info("Provider %s initialized for model %s", self.name, resolved.model)
        return True

    def _require_config(self) -> ProviderConfig:
        if self.config is None:
            raise NotInitializedError()
        return self.config

    def compute_headers(self) -> dict[str, str]:
        config = self._require_config()
        headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }
        if config.organization_id:
            headers[ORGANIZATION_HEADER] = config.organization_id
        return headers

    def get_effective_configuration(self) -> EffectiveConfiguration:
        config = self._require_config()
        return EffectiveConfiguration(
            endpoint=config.endpoint,
            auth_token=config.api_key,
            supports_system_role=supports_system_role(
                config.model, default=self._default_supports_system_role
            ),
        )

    def send_request(
        self,
        user_content: str,
        system_content: str,
        on_complete: CompletionCallback,
    ) -> None:
        completion = SingleShotCompletion(on_complete)
        if (
            self.state is not AdapterState.READY
            or self.config is None
            or self.transport is None
        ):
            error = NotInitializedError()
            logger.error("%s (provider=%s, state=%s)", error, self.name, self.state.value)
            completion.resolve(error.as_body())
            return

        logger.info("Sending request to %s using model: %s", self.name, self.config.model)
        try:
            payload = build_request_payload(
                user_content,
                system_content,
                self.config,
                prompt_merger=self.prompt_merger,
                default_supports_system_role=self._default_supports_system_role,
            )
        except SchemaParseError as exc:
            logger.error("Failed to build request payload: %s", exc)
            completion.resolve(exc.as_body())
            return
        except Exception as exc:
            logger.exception("Failed to build request payload for model %s", self.config.model)
            completion.resolve(
                DependencyConstructionError(f"Failed to build request payload: {exc}").as_body()
            )
            return

        body = payload.serialize()
        logger.debug("LLM request payload:\n\n%s", body)

        try:
            self.transport.post(self.config.endpoint, self.config.api_key, body, completion)
        except Exception as exc:
            if completion.resolved:
                # Body already delivered, so the failure came from the completion callback.
                logger.exception("Completion callback raised for %s response", self.name)
                return
            logger.exception("Transport raised while posting to %s", self.config.endpoint)
            completion.resolve(TransportError(f"Transport failure: {exc}").as_body())

    def submit(self, user_content: str, system_content: str) -> Future[str]:
        """Send a request and return a future resolved with its terminal body."""
        future: Future[str] = Future()
        self.send_request(user_content, system_content, future.set_result)
        return future

    def parse_response(self, body: str) -> TranslationResponse:
        return parse_chat_completion(body)
