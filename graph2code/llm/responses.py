"""Normalization of chat-completion responses into graph translations."""

from __future__ import annotations

import json
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from graph2code.llm.errors import ResponseParseError
from graph2code.llm.schema import SCHEMA_VERSION, load_translation_schema, validate_against_schema

_CONTENT_PATH = "$.choices[0].message.content"
_CODE_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


class GraphCode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    graph_declaration: str = Field(alias="graphDeclaration")
    graph_implementation: str = Field(alias="graphImplementation")
    implementation_notes: str = Field(default="", alias="implementationNotes")


class GraphTranslation(BaseModel):
    graph_name: str
    graph_type: str
    graph_class: str
    code: GraphCode


class TranslationResponse(BaseModel):
    """Provider-independent result of one translation request."""

    model_config = ConfigDict(extra="forbid")

    schema_version: Literal["graph_translation/v1"] = SCHEMA_VERSION
    graphs: list[GraphTranslation] = Field(default_factory=list)
    model: str = ""
    usage: dict[str, int] = Field(default_factory=dict)
    raw_content: str = ""


def _parse_json_object(raw_text: str, *, path: str) -> tuple[dict[str, Any], list[dict[str, str]]]:
    if not raw_text.strip():
        return {}, [{"path": path, "code": "JSON_EMPTY", "message": "model output is empty"}]
    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        return {}, [
            {
                "path": path,
                "code": "JSON_PARSE",
                "message": f"model output is not valid JSON: {exc.msg}",
            }
        ]
    if not isinstance(parsed, dict):
        return {}, [{"path": path, "code": "JSON_TYPE", "message": "value must be a JSON object"}]
    return parsed, []


def _strip_code_fence(content: str) -> str:
    match = _CODE_FENCE_RE.match(content)
    return match.group("body") if match else content


def _provider_error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or json.dumps(error, sort_keys=True))
    return str(error)


def _fail(message: str, errors: list[dict[str, str]]) -> ResponseParseError:
    return ResponseParseError(
        message, errors=sorted(errors, key=lambda row: (row["code"], row["path"]))
    )


def _extract_message(envelope: dict[str, Any]) -> dict[str, Any] | None:
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    return message if isinstance(message, dict) else None


def _usage(envelope: dict[str, Any]) -> dict[str, int]:
    usage = envelope.get("usage")
    if not isinstance(usage, dict):
        return {}
    return {key: value for key, value in usage.items() if isinstance(value, int)}


def parse_chat_completion(body: str) -> TranslationResponse:
    """Validate a chat-completion body and return its graph translations.

    Raises:
        ResponseParseError: for error-shaped bodies, refusals, unexpected
            envelopes, non-JSON content or schema violations.
    """
    envelope, errors = _parse_json_object(body, path="$")
    if errors:
        raise _fail("response_envelope_invalid", errors)

    if "error" in envelope:
        raise _fail(
            "provider_error",
            [
                {
                    "path": "$.error",
                    "code": "PROVIDER_ERROR",
                    "message": _provider_error_message(envelope["error"]),
                }
            ],
        )

    message = _extract_message(envelope)
    if message is None:
        raise _fail(
            "response_envelope_invalid",
            [{"path": "$.choices", "code": "RESPONSE_SHAPE", "message": "missing choices[0].message"}],
        )
    if message.get("refusal"):
        raise _fail(
            "provider_refusal",
            [
                {
                    "path": "$.choices[0].message.refusal",
                    "code": "PROVIDER_REFUSAL",
                    "message": str(message["refusal"]),
                }
            ],
        )
    content = message.get("content")
    if not isinstance(content, str):
        raise _fail(
            "response_envelope_invalid",
            [{"path": _CONTENT_PATH, "code": "RESPONSE_SHAPE", "message": "content must be a string"}],
        )

    content = _strip_code_fence(content)
    output, errors = _parse_json_object(content, path=_CONTENT_PATH)
    if not errors:
        errors = validate_against_schema(output, load_translation_schema()["schema"], path=_CONTENT_PATH)
    if errors:
        raise _fail("translation_output_invalid", errors)

    return TranslationResponse(
        graphs=[GraphTranslation.model_validate(graph) for graph in output["graphs"]],
        model=str(envelope.get("model", "")),
        usage=_usage(envelope),
        raw_content=content,
    )
